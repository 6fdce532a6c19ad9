from __future__ import annotations
import argparse
import logging
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from libffx.errors import FfxError
from libffx.model import Color, Control, ControlType, Effect
from libffx.reader import DEFAULT_MAX_DEPTH, DEFAULT_MAX_LENGTH, DecoderOptions, parse
from libffx.summary import describe_tree, summarize_ffx
from libffx.writer import encode_tree, write_ffx

console = Console()
log = logging.getLogger("ffxcli")


def _options(args: argparse.Namespace) -> DecoderOptions:
    return DecoderOptions(max_length=args.max_length, strict_containers=args.strict, max_depth=args.max_depth)


def _read(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def demo_effect() -> Effect:
    return Effect(
        name="My Effect",
        match_name="Custom/Effect/Name",
        controls=[
            Control(
                name="Slider Control",
                ui_type=ControlType.SLIDER,
                match_name="Custom/Slider/1",
                id=1,
                default=50,
            ),
            Control(
                name="Color Control",
                ui_type=ControlType.COLOR,
                match_name="Custom/Color/1",
                id=2,
                default=Color(255, 0, 0),
            ),
        ],
    )


def cmd_summary(args: argparse.Namespace) -> int:
    s = summarize_ffx(args.ffx, _options(args))
    console.print(f"[bold]File:[/bold] {s.path}")
    console.print(f"[bold]Size:[/bold] {s.file_size} bytes")
    if s.root_tag is None:
        console.print("[red]No chunk found.[/red]")
    else:
        console.print(f"[bold]Root:[/bold] {s.root_tag} {s.subtype!r}   [bold]Chunks:[/bold] {s.chunk_count}")

    t = Table(title="Chunk tags")
    t.add_column("Tag")
    t.add_column("Count", justify="right")
    for tag, n in s.tag_counts:
        t.add_row(tag, str(n))
    if not s.tag_counts:
        t.add_row("(none found)", "-")
    console.print(t)

    if s.names:
        console.print("[bold]Names:[/bold] " + escape(", ".join(s.names)))
    for issue in s.issues:
        console.print(f"[yellow]issue[/yellow] {escape(str(issue))}")
    return 0 if s.root_tag is not None else 2


def cmd_dump(args: argparse.Namespace) -> int:
    result = parse(_read(args.ffx), _options(args))
    if result.root is None:
        console.print("[red]No chunk found.[/red]")
        return 2

    lines = describe_tree(result.root)
    _, label = next(lines)
    tree = Tree(escape(label))
    stack = [tree]
    for depth, label in lines:
        del stack[depth:]
        stack.append(stack[-1].add(escape(label)))
    console.print(tree)

    for issue in result.issues:
        console.print(f"[yellow]issue[/yellow] {escape(str(issue))}")
    return 0


def cmd_verify_roundtrip(args: argparse.Namespace) -> int:
    data = _read(args.ffx)
    result = parse(data, _options(args))
    if result.root is None:
        console.print("[red]No chunk found.[/red]")
        return 2

    out = encode_tree(result.root)
    if out == data:
        console.print("[green]IDENTICAL[/green]")
        return 0

    first = next((i for i, (a, b) in enumerate(zip(data, out)) if a != b), min(len(data), len(out)))
    console.print(f"[red]DIFF[/red] in={len(data)} bytes out={len(out)} bytes, first difference at {first}")
    return 1


def cmd_demo(args: argparse.Namespace) -> int:
    write_ffx(demo_effect(), args.out)
    console.print(f"[green]Wrote[/green] {args.out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ffxcli")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every chunk the reader visits")
    sub = p.add_subparsers(dest="cmd", required=True)

    def reader_args(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("ffx")
        sp.add_argument("--max-length", type=int, default=DEFAULT_MAX_LENGTH,
                        help="Reject chunks that declare a longer payload")
        sp.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH,
                        help="Drop containers nested deeper than this")
        sp.add_argument("--strict", action="store_true",
                        help="Reject children that run past their parent's end")

    s = sub.add_parser("summary", help="Print info about an FFX file")
    reader_args(s)
    s.set_defaults(fn=cmd_summary)

    d = sub.add_parser("dump", help="Print the chunk tree of an FFX file")
    reader_args(d)
    d.set_defaults(fn=cmd_dump)

    r = sub.add_parser("verify-roundtrip", help="Read->re-encode and compare")
    reader_args(r)
    r.set_defaults(fn=cmd_verify_roundtrip)

    e = sub.add_parser("demo", help="Write the example two-control effect")
    e.add_argument("--out", required=True)
    e.set_defaults(fn=cmd_demo)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    try:
        return int(args.fn(args))
    except (FfxError, OSError) as exc:
        log.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
