"""Interactive CLI application."""
import json
import time
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from skill_coach.config import configure_logging, load_config
from skill_coach.dashboard import get_readiness_color, get_readiness_label
from skill_coach.engine import CoachEngine, build_engine
from skill_coach.planner import PlanAllocation
from skill_coach.quiz import grade_answer

console = Console()

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the user leaves a session early."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list) -> int:
    return int(session_prompt(prompt, choices=choices + list(EXIT_WORDS), show_choices=False))


def show_welcome():
    console.print(Panel(
        "[bold]Skill Coach[/bold]\n[dim]Adaptive practice across roles and domains[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("quiz", "Adaptive quiz"),
        ("practice", "Practice a role or domain"),
        ("plan", "Today's study plan"),
        ("dashboard", "Ratings + quiz stats"),
        ("review", "Weakest areas"),
        ("history", "Recent answers"),
        ("export", "Export ratings to a file"),
        ("import", "Import ratings from a file"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_question(engine: CoachEngine, question) -> bool:
    taxonomy = engine.catalog.taxonomy
    console.print(
        f"[dim]{taxonomy.role_name(question.role)} / "
        f"{taxonomy.domain_name(question.role, question.domain)} / {question.difficulty_label}[/dim]"
    )
    console.print(f"[bold]{question.prompt}[/bold]\n")
    for i, option in enumerate(question.options, 1):
        console.print(f"  [cyan]{i})[/cyan] {option}")
    started = time.monotonic()
    choice = session_int_prompt("\nYour answer", [str(i) for i in range(1, len(question.options) + 1)])
    elapsed = round(time.monotonic() - started)
    confidence = session_int_prompt("Confidence (1-5)", ["1", "2", "3", "4", "5"])
    outcome = grade_answer(question, choice - 1, time_spent=elapsed, confidence=confidence)
    rating = engine.ratings.update_rating(outcome, question, choice - 1, confidence)
    if outcome.correct:
        console.print("[green]Correct![/green]")
    else:
        console.print(f"[red]Incorrect.[/red] Answer: [green]{question.options[question.answer]}[/green]")
    if question.explanation:
        console.print(f"[dim]{question.explanation}[/dim]")
    console.print(f"[dim]Rating now {rating.mean:.1f}/10 after {rating.count} answers[/dim]\n")
    return outcome.correct


def run_quiz_session(engine: CoachEngine, count: int, role: str | None = None, domain: str | None = None) -> tuple[int, int]:
    correct = 0
    asked = 0
    for i in range(1, count + 1):
        if role:
            question = engine.selector.select_for_practice(role, domain)
        else:
            question = engine.selector.select_next(engine.config.priorities)
        if question is None:
            console.print("[yellow]No questions available![/yellow]")
            break
        console.print(f"\n[bold]Q{i}/{count}[/bold]")
        try:
            if ask_question(engine, question):
                correct += 1
            asked += 1
        except SessionExitRequested:
            break
    if asked:
        console.print(f"[bold]Score: {correct}/{asked} ({correct/asked*100:.0f}%)[/bold]\n")
    return correct, asked


def cmd_quiz(engine: CoachEngine):
    console.print("\n[bold]Adaptive Quiz[/bold] [dim](q to stop)[/dim]")
    count = IntPrompt.ask("Number of questions", default=10)
    run_quiz_session(engine, count)


def cmd_practice(engine: CoachEngine):
    taxonomy = engine.catalog.taxonomy
    if taxonomy is None:
        console.print("[red]Question catalog unavailable.[/red]")
        return
    roles = list(taxonomy.roles)
    for r in roles:
        console.print(f"  [cyan]{r}[/cyan]) {taxonomy.role_name(r)}")
    role = Prompt.ask("Select role", choices=roles)
    domains = taxonomy.domain_keys(role)
    for d in domains:
        console.print(f"  [cyan]{d}[/cyan]) {taxonomy.domain_name(role, d)}")
    domain = Prompt.ask("Select domain (blank for any)", choices=domains + [""], default="", show_choices=False)
    count = IntPrompt.ask("Number of questions", default=5)
    run_quiz_session(engine, count, role=role, domain=domain or None)


def show_plan(engine: CoachEngine, plan):
    taxonomy = engine.catalog.taxonomy
    focus = taxonomy.role_name(plan.focus) if taxonomy else plan.focus
    table = Table(title=f"Plan for {plan.date.isoformat()} ({plan.total_hours}h, focus: {focus})")
    table.add_column("Block")
    table.add_column("Minutes", justify="right")
    table.add_column("Details")
    table.add_column("Status")
    for block in plan.blocks:
        if block.completed:
            status = "[green]Done[/green]"
        elif block.start_time:
            status = "[cyan]In progress[/cyan]"
        else:
            status = ""
        table.add_row(f"{block.id}: {block.title}", str(block.duration), block.description, status)
    console.print(table)
    console.print(f"  Completed [bold]{plan.completed_minutes}[/bold] of {plan.total_minutes} minutes")


def cmd_plan(engine: CoachEngine):
    planner = engine.planner
    plan = planner.get_todays_plan()
    if plan is None or Prompt.ask("Regenerate today's plan?", choices=["y", "n"], default="n") == "y":
        for key, s in planner.plan_suggestions().items():
            console.print(f"  [cyan]{key:<8}[/cyan] {s['description']}")
        defaults = engine.config.plan
        hours = float(Prompt.ask("Available hours", default=str(defaults.hours)))
        quiz_ratio = float(Prompt.ask("Quiz ratio", default=str(defaults.quiz_ratio)))
        project_ratio = float(Prompt.ask("Project ratio", default=str(defaults.project_ratio)))
        plan = planner.generate(hours, engine.config.priorities, PlanAllocation(quiz_ratio, project_ratio))
        planner.save_plan(plan)
    show_plan(engine, plan)

    action = Prompt.ask("Action", choices=["start", "complete", "done"], default="done")
    if action == "done":
        return
    block_id = Prompt.ask("Block id", choices=[b.id for b in plan.blocks])
    if action == "start":
        planner.start_block(plan.date, block_id)
    else:
        planner.complete_block(plan.date, block_id)
    show_plan(engine, planner.get_plan(plan.date))


def cmd_dashboard(engine: CoachEngine):
    progress = engine.ratings.progress_stats()
    if progress is None:
        console.print("[red]Question catalog unavailable.[/red]")
        return
    taxonomy = engine.catalog.taxonomy
    color = get_readiness_color(progress.overall)
    console.print(Panel(
        f"Overall: [bold]{progress.overall:.1f}/10[/bold] [{color}]{get_readiness_label(progress.overall)}[/{color}]\n"
        f"Answered: {progress.questions_answered}  |  Question bank: {progress.total_questions}",
        title="Skill Dashboard", border_style="blue",
    ))

    table = Table(title="Role Breakdown")
    table.add_column("Role", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Status")
    for role, score in progress.by_role.items():
        sc_color = get_readiness_color(score)
        table.add_row(taxonomy.role_name(role), f"{score:.1f}", f"[{sc_color}]{get_readiness_label(score)}[/{sc_color}]")
    console.print(table)

    stats = engine.quiz_stats()
    console.print(f"\n  Answered: [bold]{stats.total_questions}[/bold]  |  "
                  f"Accuracy: [bold]{stats.accuracy}%[/bold]  |  "
                  f"Avg time: [bold]{stats.average_time}s[/bold]  |  "
                  f"Avg confidence: [bold]{stats.average_confidence}[/bold]  |  "
                  f"Streak: [bold]{stats.streak_count}[/bold]")


def cmd_review(engine: CoachEngine):
    areas = engine.weak_areas(limit=5)
    if not areas:
        console.print("[red]Question catalog unavailable.[/red]")
        return
    taxonomy = engine.catalog.taxonomy
    table = Table(title="Weakest Areas")
    table.add_column("Role")
    table.add_column("Domain")
    table.add_column("Rating", justify="right")
    for area in areas:
        table.add_row(
            taxonomy.role_name(area.role),
            taxonomy.domain_name(area.role, area.domain),
            f"[{get_readiness_color(area.rating)}]{area.rating:.1f}[/{get_readiness_color(area.rating)}]",
        )
    console.print(table)

    weakest = areas[0]
    if Prompt.ask(f"Drill {taxonomy.domain_name(weakest.role, weakest.domain)} now?", choices=["y", "n"], default="y") == "y":
        run_quiz_session(engine, 5, role=weakest.role, domain=weakest.domain)


def cmd_history(engine: CoachEngine):
    entries = engine.history.filtered(limit=15)
    if not entries:
        console.print("[yellow]No answers recorded yet.[/yellow]")
        return
    table = Table(title="Recent Answers")
    table.add_column("When")
    table.add_column("Question")
    table.add_column("Result")
    table.add_column("Time", justify="right")
    table.add_column("Conf.", justify="right")
    for e in entries:
        result = "[green]correct[/green]" if e.correct else "[red]wrong[/red]"
        table.add_row(
            e.timestamp.strftime("%Y-%m-%d %H:%M"),
            e.question.prompt[:50],
            result,
            f"{e.time_spent}s",
            str(e.confidence),
        )
    console.print(table)


def cmd_export(engine: CoachEngine):
    file_path = Prompt.ask("Export to", default=f"ratings-{date.today().isoformat()}.json")
    Path(file_path).write_text(json.dumps(engine.ratings.export_ratings(), indent=2))
    console.print(f"[green]Ratings exported to {file_path}[/green]")


def cmd_import(engine: CoachEngine):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    if engine.ratings.import_ratings(json.loads(Path(file_path).read_text())):
        console.print("[green]Ratings imported.[/green]")
    else:
        console.print("[red]Not a ratings export file.[/red]")


COMMANDS = {
    "quiz": cmd_quiz,
    "practice": cmd_practice,
    "plan": cmd_plan,
    "dashboard": cmd_dashboard,
    "review": cmd_review,
    "history": cmd_history,
    "export": cmd_export,
    "import": cmd_import,
}


def main():
    config = load_config()
    configure_logging(config.log_level)
    engine = build_engine(config)
    if not engine.catalog.available:
        console.print("[yellow]Question catalog could not be loaded; quizzes are disabled.[/yellow]")

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="quiz").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Keep practicing![/dim]")
                break
            elif choice in COMMANDS:
                COMMANDS[choice](engine)
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
