import argparse
import sys
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from caption_fetcher.config import settings
from caption_fetcher.errors import CaptionError, ValidationError
from caption_fetcher.models.responses import LanguagesResponse, TranscriptResponse
from caption_fetcher.services.transcripts import TranscriptService

console = Console()

def format_time(seconds: float) -> str:
    m, s = divmod(int(seconds), 60)
    h, m = divmod(m, 60)
    if h > 0:
        return f"{h:02d}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"

def render_languages(response: LanguagesResponse):
    if not response.options:
        console.print(f"[yellow]No captions available for {response.video_id}.[/yellow]")
        return
    table = Table(title=f"Captions for {response.video_id} (cache: {response.cache_status})", show_header=True, header_style="bold magenta")
    table.add_column("Language", style="white")
    table.add_column("Code", style="cyan")
    table.add_column("Kind", style="green")
    for option in response.options:
        table.add_row(escape(option.language), option.language_code, option.kind)
    console.print(table)

def render_transcript(response: TranscriptResponse, timestamps: bool = False):
    result = response.result
    title = f"{response.video_id} {result.language_code}/{result.kind} (cache: {response.cache_status})"
    if not timestamps:
        console.print(Panel(escape(result.transcript), title=title))
        return
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Time", style="cyan", width=15)
    table.add_column("Text", style="white")
    for part in result.parts:
        table.add_row(f"{format_time(part.start)} - {format_time(part.end)}", escape(part.text))
    console.print(table)

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--no-cache", action="store_true", help="Bypass the cache and always fetch from YouTube")
    common.add_argument("--json", action="store_true", help="Print the raw JSON response")

    parser = argparse.ArgumentParser(prog="caption-fetcher", description="Fetch YouTube captions and transcripts")
    sub = parser.add_subparsers(dest="command", required=True)

    langs = sub.add_parser("languages", parents=[common], help="List available caption tracks")
    langs.add_argument("url", help="Video URL or 11-character video ID")

    tr = sub.add_parser("transcript", parents=[common], help="Fetch a transcript")
    tr.add_argument("url", help="Video URL or 11-character video ID")
    tr.add_argument("--lang", help="Caption language code", default=settings.DEFAULT_LANGUAGE)
    tr.add_argument("--kind", help="Caption kind (asr for auto-generated)", default=settings.DEFAULT_KIND)
    tr.add_argument("--timestamps", action="store_true", help="Show timed segments instead of plain text")
    return parser

def main(argv=None, service: TranscriptService = None) -> int:
    args = build_parser().parse_args(argv)
    # Users often paste URLs wrapped in quotes or backticks
    url = args.url.strip().strip('`').strip('"').strip("'").strip()

    service = service or TranscriptService(use_cache=not args.no_cache)
    try:
        with service:
            if args.command == "languages":
                response = service.list_languages(url)
                if args.json:
                    console.print_json(response.model_dump_json(by_alias=True))
                else:
                    render_languages(response)
            else:
                response = service.get_transcript(url, language=args.lang, kind=args.kind)
                if args.json:
                    console.print_json(response.model_dump_json(by_alias=True))
                else:
                    render_transcript(response, timestamps=args.timestamps)
    except ValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return 2
    except CaptionError as e:
        console.print(f"[bold red]Error ({e.status_code}):[/bold red] {escape(str(e))}")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
