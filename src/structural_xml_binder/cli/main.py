"""Main CLI entry point for the xml-bind command-line tool.

Binds XML files onto a Python class named on the command line and prints the
resulting object graph, or shows the mutator table the binder derives for a
class.
"""

import argparse
import collections.abc
import importlib
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from structural_xml_binder import __version__
from structural_xml_binder.binding import (
    BindingPolicy,
    DescriptorRegistry,
    MappingPolicy,
    StructuralBinder,
)
from structural_xml_binder.shared import (
    BinderConfig,
    ConfigError,
    XMLBinderError,
    configure_logging,
    get_logger,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

PRESETS = {
    "default": BinderConfig,
    "strict": BinderConfig.strict,
    "lenient": BinderConfig.lenient,
    "python_objects": BinderConfig.python_objects,
}


class UsageError(Exception):
    """Raised for invalid command-line input detected after argument parsing."""


def load_type(type_path: str) -> type:
    """Import a class from ``package.module:ClassName``."""
    module_name, sep, qualname = type_path.partition(":")
    if not sep or not module_name or not qualname:
        raise UsageError(f"Type must be given as module:Class, got {type_path!r}")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise UsageError(f"Cannot import module {module_name!r}: {e}") from e
    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise UsageError(f"Module {module_name!r} has no attribute {qualname!r}") from e
    if not isinstance(obj, type):
        raise UsageError(f"{type_path} is not a class")
    return obj


def to_plain(value: Any) -> Any:
    """Convert a bound object graph into JSON-compatible data."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, collections.abc.Set)):
        return [to_plain(item) for item in value]
    if hasattr(value, "__dict__"):
        return {
            name: to_plain(item)
            for name, item in sorted(vars(value).items())
            if not name.startswith("_")
        }
    return str(value)


class BindProcessor:
    """Binds files for the ``bind`` command."""

    def __init__(
        self,
        target_type: type,
        config: BinderConfig,
        policy: Optional[BindingPolicy] = None,
    ) -> None:
        self.target_type = target_type
        self.policy = policy
        self.binder = StructuralBinder(config)
        self.logger = get_logger(__name__, None, "cli_processor")

    def process_single_file(self, file_path: Path) -> Dict[str, Any]:
        """Bind one file and return a JSON-ready report."""
        start_time = time.time()
        try:
            result = self.binder.bind_detailed(file_path, self.target_type, self.policy)
        except XMLBinderError as e:
            self.logger.warning(
                "Bind failed", extra={"file": str(file_path), "error_type": type(e).__name__}
            )
            return {
                "file": str(file_path),
                "success": False,
                "error": str(e),
                "error_type": type(e).__name__,
                "processing_time_ms": (time.time() - start_time) * 1000,
            }

        return {
            "file": str(file_path),
            "success": result.success,
            "value": to_plain(result.value),
            "metrics": result.metrics.to_dict(),
            "diagnostics": [
                {
                    "severity": diag.severity.name,
                    "message": diag.message,
                    "component": diag.component,
                    "path": diag.path,
                } for diag in result.diagnostics
            ],
        }

    def batch_process(self, paths: List[Path]) -> List[Dict[str, Any]]:
        """Bind every file in ``paths`` in order."""
        return [self.process_single_file(path) for path in paths]


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-bind",
        description="Bind XML documents onto Python classes by element name"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Bind command
    bind_parser = subparsers.add_parser("bind", help="Bind XML files onto a class")
    bind_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files to bind"
    )
    bind_parser.add_argument(
        "--type", "-t",
        dest="target_type",
        required=True,
        help="Target class as module:Class"
    )
    bind_parser.add_argument(
        "--policy", "-p",
        type=Path,
        help="JSON file with 'skip' and 'field_names' entries"
    )
    bind_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Binder configuration JSON file"
    )
    bind_parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="default",
        help="Binder configuration preset"
    )
    bind_parser.add_argument(
        "--max-depth",
        type=int,
        help="Maximum element nesting depth"
    )
    bind_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)"
    )
    bind_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    # Inspect command
    inspect_parser = subparsers.add_parser(
        "inspect", help="Show the fields the binder finds on a class"
    )
    inspect_parser.add_argument(
        "target_type",
        help="Target class as module:Class"
    )
    inspect_parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="default",
        help="Binder configuration preset"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format bind results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2, default=str)

    if not results:
        return "No results to display."

    lines = []
    successful = sum(1 for r in results if r.get("success", False))
    lines.append(f"Bound {len(results)} files, {successful} successful")
    lines.append("-" * 60)

    for result in results:
        status = "OK  " if result.get("success", False) else "FAIL"
        lines.append(f"{status} {result['file']}")
        if "error" in result:
            lines.append(f"   {result['error_type']}: {result['error']}")
        else:
            metrics = result.get("metrics", {})
            lines.append(
                f"   Elements: {metrics.get('elements_visited', 0)}, "
                f"Skipped: {metrics.get('elements_skipped', 0)}, "
                f"Time: {metrics.get('processing_time_ms', 0):.1f}ms"
            )
            for diag in result.get("diagnostics", []):
                if diag["severity"] in ("WARNING", "ERROR"):
                    lines.append(f"   {diag['severity'].title()}: {diag['message']}")
        lines.append("")

    return "\n".join(lines)


def _load_config(args: argparse.Namespace) -> BinderConfig:
    if getattr(args, "config", None):
        try:
            config = BinderConfig.from_json(args.config.read_text(encoding="utf-8"))
        except OSError as e:
            raise UsageError(f"Cannot read config file {args.config}: {e}") from e
        except json.JSONDecodeError as e:
            raise UsageError(f"Config file {args.config} is not valid JSON: {e}") from e
    else:
        config = PRESETS[args.preset]()
    if getattr(args, "max_depth", None) is not None:
        config = config.override(binding__max_depth=args.max_depth)
    return config


def _load_policy(path: Optional[Path]) -> Optional[BindingPolicy]:
    if path is None:
        return None
    try:
        return MappingPolicy.from_json(path)
    except OSError as e:
        raise UsageError(f"Cannot read policy file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise UsageError(f"Policy file {path} is not valid JSON: {e}") from e


def cmd_bind(args: argparse.Namespace, config: Optional[BinderConfig] = None) -> int:
    """Handle bind command."""
    target_type = load_type(args.target_type)
    if config is None:
        config = _load_config(args)
    policy = _load_policy(args.policy)

    processor = BindProcessor(target_type, config, policy)
    results = processor.batch_process(args.paths)
    formatted_output = format_results(results, args.format)

    if args.output:
        try:
            args.output.write_text(formatted_output, encoding="utf-8")
            print(f"Results written to {args.output}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return EXIT_FAILURE
    else:
        print(formatted_output)

    successful = sum(1 for r in results if r.get("success", False))
    return EXIT_OK if results and successful == len(results) else EXIT_FAILURE


def cmd_inspect(args: argparse.Namespace) -> int:
    """Handle inspect command."""
    target_type = load_type(args.target_type)
    config = PRESETS[args.preset]()
    registry = DescriptorRegistry(config.binding)
    try:
        rows = registry.describe(target_type).describe()
    except XMLBinderError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    print(json.dumps(rows, indent=2))
    return EXIT_OK


def _logging_level(args: argparse.Namespace, config: Optional[BinderConfig] = None) -> str:
    """Command-line flags win; otherwise an explicit config file sets the level."""
    if args.verbose:
        return "DEBUG"
    if args.quiet:
        return "ERROR"
    if config is not None and getattr(args, "config", None):
        return config.global_.logging_level
    return "WARNING"


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    # Route to appropriate command handler
    try:
        if args.command == "bind":
            config = _load_config(args)
            configure_logging(_logging_level(args, config))
            return cmd_bind(args, config)
        elif args.command == "inspect":
            configure_logging(_logging_level(args))
            return cmd_inspect(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return EXIT_USAGE

    except (UsageError, ConfigError) as e:
        print(f"xml-bind: error: {e}", file=sys.stderr)
        return EXIT_USAGE

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
