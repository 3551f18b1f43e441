import logging
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text

console = Console()


def setup_logging(debug: bool = False) -> None:
    """Route all log records through rich; DEBUG level when requested."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=debug, markup=False)],
        force=True,
    )
    # selenium and urllib3 are noisy at DEBUG
    for name in ("selenium", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


@dataclass
class RunStats:
    courses: int = 0
    modules: int = 0
    skipped_modules: int = 0
    videos: int = 0
    failed_videos: int = 0


def print_banner():
    """Print a clean banner."""
    banner_text = Text()
    banner_text.append("🎓 SKOOL DOWNLOADER\n", style="bold cyan")
    banner_text.append("Offline archive of classroom courses, descriptions & videos\n", style="green")

    panel = Panel(
        banner_text,
        title="Starting Export",
        border_style="cyan",
        padding=(1, 2)
    )
    console.print(panel)


def print_course_header(position: int, total: int, title: str):
    console.print(f"\n[bold cyan][{position}/{total}][/bold cyan] ➜ {title}", markup=True, highlight=False)


def print_module_header(position: int, total: int, title: str):
    console.print(f"  [cyan][{position}/{total}][/cyan] ➜ {title}", markup=True, highlight=False)


def print_completion_summary(stats: RunStats, total_time: float):
    """Print completion summary."""
    status_text = Text()

    if stats.failed_videos == 0:
        status_text.append("🎉 Export completed successfully!\n", style="bold green")
    else:
        status_text.append(f"⚠️  Export completed with {stats.failed_videos} failed video(s)\n", style="bold yellow")

    status_text.append(f"📚 Courses: {stats.courses}\n", style="white")
    status_text.append(f"📄 Modules: {stats.modules} ({stats.skipped_modules} already archived)\n", style="white")
    status_text.append(f"✅ Videos downloaded: {stats.videos}\n", style="green")
    status_text.append(f"❌ Videos failed: {stats.failed_videos}\n", style="red" if stats.failed_videos > 0 else "dim")
    status_text.append(f"⏱️  Total time: {total_time:.1f}s\n", style="blue")

    panel = Panel(
        status_text,
        title="Export Complete",
        border_style="green" if stats.failed_videos == 0 else "yellow",
        padding=(1, 2)
    )
    console.print(panel)
