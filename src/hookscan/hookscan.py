"""
hookscan - static safety scanner for agent lifecycle hooks.

Reads hook files, settings documents and stack bundles, and reports the
capabilities each hook exercises. Hook text is only ever read, never run.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from hookscan.core.config import Config, configure_logging, load_config, log_event
from hookscan.core.hooks import DEFAULT_HOOKS_DIR, load_hook_file, load_hooks, load_stack_hooks
from hookscan.core.models import Hook, RiskLevel, ScanResult
from hookscan.core.report import generate_safety_report
from hookscan.core.risk import at_least, classify_risk
from hookscan.core.scanner import scan_hook
from hookscan.core.settings import scan_settings_hooks

EXIT_OK = 0
EXIT_FLAGGED = 1
EXIT_ERROR = 2


class InputError(Exception):
    """An input file could not be read or decoded."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hookscan",
        description="Statically assess agent hooks for risky capabilities.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        metavar="PATH",
        help=f"hook file or directory of hooks (default: {DEFAULT_HOOKS_DIR})",
    )
    parser.add_argument("--settings", type=Path, metavar="FILE", help="scan inline hooks of a settings JSON file")
    parser.add_argument("--stack", type=Path, metavar="FILE", help="scan a stack bundle JSON file")
    parser.add_argument("--json", action="store_true", help="print results as JSON")
    parser.add_argument(
        "--fail-on",
        choices=[level.value for level in RiskLevel],
        default=RiskLevel.DANGEROUS.value,
        help="exit 1 when any hook reaches this level (default: dangerous)",
    )
    return parser


def _read_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InputError(f"{path}: {e}") from None


def collect_hooks(paths: list[Path]) -> list[Hook]:
    """Load hook descriptors from files and hook directories."""
    hooks = []
    for path in paths:
        try:
            if path.is_dir():
                hooks.extend(load_hooks(path))
            elif path.is_file():
                hooks.append(load_hook_file(path))
            else:
                raise InputError(f"{path}: no such file or directory")
        except OSError as e:
            raise InputError(f"{path}: {e}") from None
    return hooks


def run(args: argparse.Namespace, config: Config) -> tuple[list[Hook], dict[str, ScanResult]]:
    """Scan everything the arguments name."""
    if args.paths:
        hooks = collect_hooks(args.paths)
    elif args.settings is None and args.stack is None:
        try:
            hooks = load_hooks(DEFAULT_HOOKS_DIR)
        except OSError as e:
            raise InputError(f"{DEFAULT_HOOKS_DIR}: {e}") from None
    else:
        hooks = []
    inline: dict[str, ScanResult] = {}

    if args.stack is not None:
        bundle = _read_json(args.stack)
        hooks.extend(load_stack_hooks(bundle))
        if isinstance(bundle, dict):
            inline.update(scan_settings_hooks(bundle.get("settings"), config))

    if args.settings is not None:
        inline.update(scan_settings_hooks(_read_json(args.settings), config))

    for hook in hooks:
        scan_hook(hook, config)
    return hooks, inline


def to_json(hooks: list[Hook], inline: dict[str, ScanResult]) -> dict:
    return {
        "hooks": [
            {
                "name": hook.name,
                "type": str(hook.kind),
                "filePath": hook.file_path,
                "riskLevel": str(hook.risk_level),
                "scanResult": hook.scan_result.to_dict(),
            }
            for hook in hooks
        ],
        "inline": {
            address: {**result.to_dict(), "riskLevel": str(classify_risk(result))}
            for address, result in inline.items()
        },
    }


def exit_code(hooks: list[Hook], inline: dict[str, ScanResult], fail_on: RiskLevel) -> int:
    levels = [hook.risk_level for hook in hooks]
    levels.extend(classify_risk(result) for result in inline.values())
    if any(level is not None and at_least(level, fail_on) for level in levels):
        return EXIT_FLAGGED
    return EXIT_OK


# === Entry point ===


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(Path.cwd())
    except (OSError, ValueError) as e:
        print(f"hookscan: config error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    configure_logging(config)

    try:
        hooks, inline = run(args, config)
    except InputError as e:
        log_event("info", "input_error", error=str(e))
        print(f"hookscan: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    if args.json:
        print(json.dumps(to_json(hooks, inline), indent=2))
    else:
        report = generate_safety_report(hooks, inline)
        print(report if report else "No hooks found.")

    code = exit_code(hooks, inline, RiskLevel(args.fail_on))
    log_event("info", "finished", hooks=len(hooks), inline=len(inline), exit_code=code)
    sys.exit(code)


if __name__ == "__main__":
    main()
