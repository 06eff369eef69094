"""CLI interface using Typer."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Callable, NoReturn, Optional, TypeVar

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mealman.agent.response import (
    AgentResponse,
    check_in_notice,
    create_response,
    error_response,
    fallback_notice,
    over_budget_notice,
    pace_notice,
    refeed_notice,
)
from mealman.config import get_settings, reload_settings

T = TypeVar("T")

app = typer.Typer(
    help="Adaptive calorie budgets, zigzag correction and weight projections",
    no_args_is_help=True,
)
console = Console()

config_app = typer.Typer(help="Show or initialize settings")
app.add_typer(config_app, name="config")


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None, "--config", help="Settings file (default: ~/.mealman/config.yaml)"
    ),
) -> None:
    """Adaptive caloric-budget engine."""
    if config is not None:
        reload_settings(config)


# ============================================================================
# Helpers
# ============================================================================


def wants_json(json_output: Optional[bool]) -> bool:
    """Resolve --json/--table against the configured default format."""
    if json_output is None:
        return get_settings().defaults.output_format == "json"
    return json_output


def output_json(response: AgentResponse, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = response.to_json()
    if file:
        file.write(json_str)
    else:
        print(json_str)


def fail(command: str, message: str, json_output: bool, suggestions: Optional[list[str]] = None) -> NoReturn:
    """Report an error in the requested format and exit with status 1."""
    if json_output:
        output_json(error_response(command, message, suggestions))
    else:
        console.print(f"[red]{message}[/red]")
        for suggestion in suggestions or []:
            console.print(f"  {suggestion}")
    raise typer.Exit(1)


def load_input(
    path: Path,
    parser: Callable[[Any], T],
    command: str,
    json_output: bool,
) -> T:
    """Read a YAML/JSON file and parse it, exiting cleanly on bad input."""
    from mealman.tracking.loaders import load_yaml_file

    try:
        return parser(load_yaml_file(path))
    except FileNotFoundError:
        fail(command, f"File not found: {path}", json_output)
    except (OSError, ValueError, yaml.YAMLError) as e:
        fail(command, f"Could not read {path}: {e}", json_output)


def parse_day(date_str: Optional[str], command: str, json_output: bool) -> date:
    if not date_str:
        return date.today()
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        fail(command, f"Invalid date '{date_str}' (expected YYYY-MM-DD)", json_output)


def standard_plan(profile):
    """Fresh plan for a profile with the stored daily target applied."""
    from mealman.profiles.body_calc import apply_stored_target, calculate_plan

    budget = get_settings().budget
    plan = calculate_plan(
        profile,
        safety_floor=budget.safety_floor_kcal,
        max_below_bmr=budget.max_below_bmr,
        adjustments=goal_adjustments(),
    )
    return apply_stored_target(plan, profile)


def goal_adjustments() -> dict:
    from mealman.profiles.body_calc import Goal

    budget = get_settings().budget
    return {
        Goal.FAT_LOSS: -budget.fat_loss_deficit,
        Goal.MUSCLE_GAIN: budget.muscle_gain_surplus,
        Goal.MAINTENANCE: 0,
    }


# ============================================================================
# Plan
# ============================================================================


@app.command()
def plan(
    profile_path: Path = typer.Argument(..., help="Profile YAML/JSON file"),
    json_output: Optional[bool] = typer.Option(
        None, "--json/--table", help="Output format (default: settings defaults.output_format)"
    ),
) -> None:
    """Calculate BMR, maintenance and macro targets for a profile."""
    from mealman.profiles.body_calc import estimate_energy
    from mealman.tracking.loaders import profile_from_dict

    json_output = wants_json(json_output)
    profile = load_input(profile_path, profile_from_dict, "plan", json_output)
    energy = estimate_energy(profile)
    macro_plan = standard_plan(profile)

    if json_output:
        data = macro_plan.to_dict()
        data["formula_estimates"] = {k: round(v, 1) for k, v in energy.formula_estimates.items()}
        output_json(create_response(
            "plan",
            data=data,
            human_summary=f"{macro_plan.calories} kcal/day, "
            f"P{macro_plan.protein_g} F{macro_plan.fat_g} C{macro_plan.carb_g}",
        ))
        return

    table = Table(title="Macro Plan")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("BMR", f"{macro_plan.bmr} kcal (+/- {macro_plan.uncertainty_band})")
    table.add_row("Maintenance", f"{macro_plan.maintenance} kcal")
    table.add_row("Target", f"[bold]{macro_plan.calories} kcal[/bold]")
    table.add_row("Weekly", f"{macro_plan.weekly_calories} kcal")
    table.add_row("Protein", f"{macro_plan.protein_g} g")
    table.add_row("Fat", f"{macro_plan.fat_g} g")
    table.add_row("Carbs", f"{macro_plan.carb_g} g")
    console.print(table)

    formulas = Table(title="Formula Estimates")
    formulas.add_column("Formula", style="cyan")
    formulas.add_column("BMR", justify="right")
    for name, value in energy.formula_estimates.items():
        formulas.add_row(name, f"{value:.1f}")
    console.print(formulas)


# ============================================================================
# Weekly budget and zigzag
# ============================================================================


@app.command()
def budget(
    records_path: Path = typer.Argument(..., help="Daily adherence records YAML/JSON"),
    profile_path: Path = typer.Option(..., "--profile", "-p", help="Profile YAML/JSON file"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD, default: today)"),
    json_output: Optional[bool] = typer.Option(
        None, "--json/--table", help="Output format (default: settings defaults.output_format)"
    ),
) -> None:
    """Show this week's checked-meal consumption against the weekly budget."""
    from mealman.tracking.adherence import (
        adherence_streak,
        daily_progress,
        needs_refeed,
        weekly_budget_status,
    )
    from mealman.tracking.loaders import profile_from_dict, records_from_dicts
    from mealman.tracking.models import WeeklyBudget

    json_output = wants_json(json_output)
    today = parse_day(date_str, "budget", json_output)
    profile = load_input(profile_path, profile_from_dict, "budget", json_output)
    records = load_input(records_path, records_from_dicts, "budget", json_output)

    macro_plan = standard_plan(profile)
    weekly = WeeklyBudget.from_daily_target(macro_plan.calories, profile.weekly_calories)
    status = weekly_budget_status(records, weekly, today)
    todays = next((r for r in records if r.date == today), None)
    progress = daily_progress(todays, macro_plan)
    streak = adherence_streak(records, today)
    refeed = needs_refeed(records, macro_plan.bmr)

    notices = []
    if status.over_budget:
        notices.append(over_budget_notice(-status.remaining_kcal))
    if refeed:
        notices.append(refeed_notice())

    if json_output:
        output_json(create_response(
            "budget",
            data={
                "weekly": status.to_dict(),
                "today": progress.to_dict(),
                "streak_days": streak,
                "refeed_recommended": refeed,
            },
            notices=notices,
            human_summary=f"{status.consumed_kcal:.0f} / {status.weekly_limit} kcal this week",
        ))
        return

    label = "[red]Over Budget[/red]" if status.over_budget else "[green]On Track[/green]"
    console.print(Panel(
        f"{status.consumed_kcal:.0f} / {status.weekly_limit} kcal ({status.percent_used:.0f}%)  {label}\n"
        f"Week of {status.week_start.isoformat()}  |  Streak: {streak} days",
        title="Weekly Budget (Checked Meals)",
    ))

    table = Table(title=f"Today ({today.isoformat()})")
    table.add_column("Macro", style="cyan")
    table.add_column("Consumed", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("%", justify="right")
    table.add_row("Calories", f"{progress.consumed.kcal:.0f}", str(macro_plan.calories), str(progress.calories_pct))
    table.add_row("Protein", f"{progress.consumed.protein_g:.0f}", str(macro_plan.protein_g), str(progress.protein_pct))
    table.add_row("Carbs", f"{progress.consumed.carb_g:.0f}", str(macro_plan.carb_g), str(progress.carb_pct))
    table.add_row("Fat", f"{progress.consumed.fat_g:.0f}", str(macro_plan.fat_g), str(progress.fat_pct))
    console.print(table)

    for notice in notices:
        console.print(f"[yellow]{notice.message}[/yellow]")


@app.command()
def zigzag(
    records_path: Path = typer.Argument(..., help="Daily adherence records YAML/JSON"),
    target: Optional[int] = typer.Option(None, "--target", "-t", help="Standard daily target (kcal)"),
    profile_path: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile to derive the target from"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD, default: today)"),
    json_output: Optional[bool] = typer.Option(
        None, "--json/--table", help="Output format (default: settings defaults.output_format)"
    ),
) -> None:
    """Correct today's calorie target for this week's surplus or deficit."""
    from mealman.tracking.loaders import profile_from_dict, records_from_dicts
    from mealman.tracking.zigzag import calculate_zigzag_target

    json_output = wants_json(json_output)
    today = parse_day(date_str, "zigzag", json_output)

    if target is None:
        if profile_path is None:
            fail(
                "zigzag",
                "Provide --target or --profile",
                json_output,
                ["mealman zigzag week.yaml --target 2000"],
            )
        profile = load_input(profile_path, profile_from_dict, "zigzag", json_output)  # type: ignore[arg-type]
        target = standard_plan(profile).calories

    records = load_input(records_path, records_from_dicts, "zigzag", json_output)
    result = calculate_zigzag_target(
        today,
        target,
        records,
        note_threshold=get_settings().zigzag.note_threshold_kcal,
    )

    if json_output:
        output_json(create_response(
            "zigzag",
            data=result.to_dict(),
            human_summary=f"Today's target: {result.corrected_target_kcal} kcal "
            f"({-result.adjustment_per_day:+d} vs standard)",
        ))
        return

    table = Table(title=f"Zigzag Target ({today.isoformat()})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Standard target", f"{result.standard_daily_target} kcal")
    table.add_row("Days elapsed", str(result.days_elapsed))
    table.add_row("Expected so far", f"{result.expected_total:.0f} kcal")
    table.add_row("Checked so far", f"{result.actual_total:.0f} kcal")
    table.add_row("Net surplus", f"{result.net_surplus:+.0f} kcal")
    table.add_row("Adjustment/day", f"{-result.adjustment_per_day:+d} kcal")
    table.add_row("Today's target", f"[bold]{result.corrected_target_kcal} kcal[/bold]")
    console.print(table)

    if result.context_note:
        console.print(Panel(result.context_note, title="Context"))


# ============================================================================
# Weight trajectory and check-ins
# ============================================================================


@app.command()
def predict(
    logs_path: Path = typer.Argument(..., help="Weight log YAML/JSON"),
    profile_path: Path = typer.Option(..., "--profile", "-p", help="Profile YAML/JSON file"),
    target_weight: Optional[float] = typer.Option(None, "--target-weight", help="Goal weight (kg)"),
    json_output: Optional[bool] = typer.Option(
        None, "--json/--table", help="Output format (default: settings defaults.output_format)"
    ),
) -> None:
    """Project weight and body fat from the logged trend."""
    from mealman.tracking.loaders import profile_from_dict, weight_logs_from_dicts
    from mealman.tracking.trajectory import predict_weight_trajectory

    json_output = wants_json(json_output)
    profile = load_input(profile_path, profile_from_dict, "predict", json_output)
    entries = load_input(logs_path, weight_logs_from_dicts, "predict", json_output)

    settings = get_settings().prediction
    prediction = predict_weight_trajectory(
        entries,
        standard_plan(profile),
        target_weight=target_weight,
        horizon_days=settings.horizon_days,
        fallback_weekly_change=settings.fallback_weekly_change_kg,
    )

    notices = []
    if prediction.is_fallback:
        notices.append(fallback_notice())
    if not prediction.is_healthy_pace:
        notices.append(pace_notice(prediction.recommendation))

    if json_output:
        output_json(create_response(
            "predict",
            data=prediction.to_dict(),
            notices=notices,
            human_summary=f"{prediction.projected_weight_kg:.1f} kg in "
            f"{prediction.horizon_days} days ({prediction.weekly_rate_kg:+.2f} kg/week)",
        ))
        return

    table = Table(title="Weight Projection")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row(f"Weight in {prediction.horizon_days} days", f"{prediction.projected_weight_kg:.1f} kg")
    table.add_row("Body fat", f"{prediction.projected_body_fat_pct:.1f} %")
    table.add_row("Weekly rate", f"{prediction.weekly_rate_kg:+.2f} kg")
    table.add_row("Confidence", f"{prediction.confidence_score}/100")
    table.add_row("Estimated TDEE", f"{prediction.estimated_tdee_kcal:.0f} kcal")
    if prediction.milestone:
        table.add_row(
            f"Reach {prediction.milestone.target_weight_kg:g} kg",
            prediction.milestone.estimated_date.isoformat(),
        )
    console.print(table)

    if prediction.graph_data:
        graph = Table(title="Trend")
        graph.add_column("Date", style="cyan")
        graph.add_column("Weight", justify="right")
        graph.add_column("")
        for point in prediction.graph_data:
            graph.add_row(
                point.date.isoformat(),
                f"{point.weight_kg:.1f}",
                "projected" if point.is_projection else "",
            )
        console.print(graph)

    style = "green" if prediction.is_healthy_pace else "yellow"
    console.print(f"[{style}]{prediction.recommendation}[/{style}]")


@app.command()
def checkin(
    logs_path: Path = typer.Argument(..., help="Weight log YAML/JSON"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD, default: today)"),
    json_output: Optional[bool] = typer.Option(
        None, "--json/--table", help="Output format (default: settings defaults.output_format)"
    ),
) -> None:
    """Check whether a weigh-in is due."""
    from mealman.tracking.loaders import weight_logs_from_dicts
    from mealman.tracking.recalibration import check_in_status

    json_output = wants_json(json_output)
    today = parse_day(date_str, "checkin", json_output)
    entries = load_input(logs_path, weight_logs_from_dicts, "checkin", json_output)

    settings = get_settings().check_in
    status = check_in_status(
        entries,
        today,
        due_after_days=settings.due_after_days,
        reminder_after_days=settings.reminder_after_days,
    )

    if json_output:
        output_json(create_response(
            "checkin",
            data=status.to_dict(),
            notices=[check_in_notice(status.message, status.is_due)]
            if status.needs_reminder or status.is_due else [],
            human_summary=status.message,
        ))
        return

    style = "yellow" if status.needs_reminder else "green"
    console.print(f"[{style}]{status.message}[/{style}]")


@app.command()
def recalibrate(
    profile_path: Path = typer.Argument(..., help="Profile YAML/JSON file (before the check-in)"),
    new_weight: float = typer.Option(..., "--new-weight", "-w", help="Weight just logged (kg)"),
    days: int = typer.Option(7, "--days", help="Days since the previous check-in"),
    previous_calories: Optional[int] = typer.Option(
        None, "--previous-calories", help="Target in force until now (default: stored daily_calories)"
    ),
    json_output: Optional[bool] = typer.Option(
        None, "--json/--table", help="Output format (default: settings defaults.output_format)"
    ),
) -> None:
    """Recompute targets after a weigh-in, correcting off-goal trends."""
    from mealman.tracking.loaders import profile_from_dict
    from mealman.tracking.recalibration import recalibrate_after_check_in

    json_output = wants_json(json_output)
    profile = load_input(profile_path, profile_from_dict, "recalibrate", json_output)
    budget_settings = get_settings().budget

    result = recalibrate_after_check_in(
        profile,
        new_weight_kg=new_weight,
        previous_weight_kg=profile.weight_kg,
        previous_calories=previous_calories or profile.daily_calories,
        days_since_last_log=max(1, days),
        safety_floor=budget_settings.safety_floor_kcal,
        max_below_bmr=budget_settings.max_below_bmr,
        adjustments=goal_adjustments(),
    )

    if json_output:
        output_json(create_response(
            "recalibrate",
            data=result.to_dict(),
            human_summary=f"New target: {result.plan.calories} kcal/day"
            + (f" ({result.adaptation_reason})" if result.adapted else ""),
        ))
        return

    console.print(f"[green]New target:[/green] {result.plan.calories} kcal/day "
                  f"({result.plan.weekly_calories} kcal/week)")
    if result.adapted:
        console.print(f"[yellow]{result.adaptation_reason}[/yellow]")


# ============================================================================
# Content-generation prompt
# ============================================================================


@app.command()
def prompt(
    records_path: Path = typer.Argument(..., help="Daily adherence records YAML/JSON"),
    profile_path: Path = typer.Option(..., "--profile", "-p", help="Profile YAML/JSON file"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD, default: today)"),
    preferences: str = typer.Option("", "--preferences", help="Free-text food preferences"),
    diet_type: Optional[str] = typer.Option(None, "--diet", help="veg, egg or non-veg"),
    json_output: Optional[bool] = typer.Option(
        None, "--json/--table", help="Output format (default: settings defaults.output_format)"
    ),
) -> None:
    """Print the meal-plan request for today's corrected target."""
    from mealman.export.llm_prompt import DailyPlanPromptGenerator
    from mealman.tracking.loaders import profile_from_dict, records_from_dicts
    from mealman.tracking.zigzag import calculate_zigzag_target

    json_output = wants_json(json_output)
    today = parse_day(date_str, "prompt", json_output)
    profile = load_input(profile_path, profile_from_dict, "prompt", json_output)
    records = load_input(records_path, records_from_dicts, "prompt", json_output)

    macro_plan = standard_plan(profile)
    result = calculate_zigzag_target(
        today,
        macro_plan.calories,
        records,
        note_threshold=get_settings().zigzag.note_threshold_kcal,
    )

    try:
        text = DailyPlanPromptGenerator().generate(
            profile, macro_plan, today, zigzag=result,
            preferences=preferences, diet_type=diet_type,
        )
    except ValueError as e:
        fail("prompt", str(e), json_output)

    if json_output:
        output_json(create_response(
            "prompt",
            data={"prompt": text, "zigzag": result.to_dict()},
            human_summary=f"Prompt for {today.isoformat()} at {result.corrected_target_kcal} kcal",
        ))
    else:
        print(text)


# ============================================================================
# Config
# ============================================================================


@config_app.command("show")
def config_show(
    json_output: Optional[bool] = typer.Option(
        None, "--json/--table", help="Output format (default: settings defaults.output_format)"
    ),
) -> None:
    """Show the active settings."""
    json_output = wants_json(json_output)
    data = get_settings().to_dict()
    if json_output:
        output_json(create_response("config show", data=data))
    else:
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=False))


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(None, "--path", help="Where to write config.yaml"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a settings file with the current values."""
    settings = get_settings()
    target = path or Path.home() / ".mealman" / "config.yaml"
    if target.exists() and not force:
        console.print(f"[yellow]{target} already exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)
    written = settings.save(target)
    console.print(f"[green]Wrote settings to {written}[/green]")


if __name__ == "__main__":
    app()
