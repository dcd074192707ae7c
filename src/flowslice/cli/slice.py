"""
CLI functionality for forward slicing.

Two drivers share one set of options:

- ``slice``: slice from the return value of the first call to CALLEE
  inside CALLER, once per analysis precision, and report the time taken
  as a CSV line ``model,caller,callee,analysis,ms``.
- ``callers``: collect the return value of every call to CALLEE anywhere
  in the program and slice from each of them.
"""

import logging
import sys
import traceback
from pathlib import Path

from flowslice.application.config import SliceConfig
from flowslice.application.errors import SliceError
from flowslice.application.resources import ExclusionSet
from flowslice.model.loader import PRECISIONS, JsonModelProvider
from flowslice.slicer import dump
from flowslice.slicer.criteria import (
    find_all_callers_of,
    find_call_site,
    find_method,
    resolve_return_value_statement,
)
from flowslice.slicer.engine import Slicer
from flowslice.slicer.options import ControlDependenceOptions, DataDependenceOptions
from flowslice.util.application.console import Console
from flowslice.util.io.formatting import milliseconds

logger = logging.getLogger(__name__)


def _setupLogging(args):
    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _openModel(args, config, console):
    exclusions = None
    if config.use_exclusions:
        exclusions = ExclusionSet.load(config.exclusions)
    with console.scope("load"):
        provider = JsonModelProvider.from_file(args.model, exclusions)
    return provider


def _render(args, slice_, slicer, **extra):
    if args.format == "json":
        return dump.generate_json_output(slice_, **extra)
    if args.format == "dot":
        return dump.generate_dot_output(slice_, slicer.graph, slicer.config.data, slicer.config.control)
    return dump.generate_text_output(slice_)


def _fail(args, e):
    print(f"Error: {e}", file=sys.stderr)
    if args.verbose:
        traceback.print_exc()
    return 1


def run_slice(args):
    """Slice from the first call to CALLEE in CALLER, per analysis."""
    _setupLogging(args)
    try:
        config = SliceConfig.from_args(args)
        console = Console(verbose=args.verbose)
        provider = _openModel(args, config, console)
        analyses = args.analysis or provider.analyses()

        for name in analyses:
            with console.scope(name):
                model = provider.load(name)
                caller = find_method(model.call_graph, args.caller)
                call = find_call_site(caller, args.callee)
                logger.info("Statement: %s", call)
                seed = resolve_return_value_statement(call)
                slicer = Slicer(model.call_graph, model.alias_oracle, config)
                slice_ = slicer.forward_slice([seed])
            elapsed = milliseconds(console.last.elapsed)

            print(_render(args, slice_, slicer, analysis=name, seed=str(seed)))
            print("%s,%s,%s,%s,%d" % (args.model, args.caller, args.callee, name, elapsed))
        return 0

    except (SliceError, ValueError, OSError) as e:
        return _fail(args, e)


def run_callers(args):
    """Slice from the return value of every call to CALLEE."""
    _setupLogging(args)
    try:
        config = SliceConfig.from_args(args)
        console = Console(verbose=args.verbose)
        provider = _openModel(args, config, console)

        with console.scope(args.analysis):
            model = provider.load(args.analysis)
            seeds = find_all_callers_of(model.call_graph, args.callee, best_effort=config.best_effort)
            console.output("Collected %d return sites to use as criteria for slicing" % len(seeds), 0)

            slicer = Slicer(model.call_graph, model.alias_oracle, config)
            slices = slicer.forward_slices(sorted(seeds, key=lambda s: s.sort_key()))
            total = sum(len(s) for s in slices.values())
            console.output("Collected %d statements in slices" % total, 0)

        if args.format != "text":
            merged = frozenset().union(*slices.values())
            print(_render(args, merged, slicer, analysis=args.analysis, seeds=len(seeds)))
        console.output("%s: %d ms" % (args.analysis, milliseconds(console.last.elapsed)))
        return 0

    except (SliceError, ValueError, OSError) as e:
        return _fail(args, e)


def _addCommonOptions(parser):
    parser.add_argument("model", type=Path, help="Program model (JSON)")
    parser.add_argument(
        "--data",
        type=DataDependenceOptions.parse,
        default=DataDependenceOptions.FULL,
        help="Data dependence: none, no-heap or full (default: full)",
    )
    parser.add_argument(
        "--control",
        type=ControlDependenceOptions.parse,
        default=ControlDependenceOptions.FULL,
        help="Control dependence: none, no-heap or full (default: full)",
    )
    parser.add_argument(
        "--max-statements", type=int, help="Abort slices larger than this"
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=["text", "json", "dot"],
        default="text",
        help="Slice output format (default: text)",
    )
    parser.add_argument(
        "--exclusions", type=Path, help="Exclusions file (default: packaged list)"
    )
    parser.add_argument(
        "--no-exclusions", action="store_true", help="Do not exclude any classes"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", "-d", action="store_true", help="Debug output"
    )


def add_slice_parser(subparsers):
    """Add slice subcommand to the argument parser."""
    parser = subparsers.add_parser(
        "slice", help="Forward slice from the return value of a call"
    )
    _addCommonOptions(parser)
    parser.add_argument("caller", help="Signature of the calling method, e.g. Example.main([Ljava/lang/String;)V")
    parser.add_argument("callee", help="Signature of the called method")
    parser.add_argument(
        "--analysis",
        "-a",
        action="append",
        help="Analysis precision to slice with; repeatable (default: every analysis in the model; "
        "known: %s)" % ", ".join(PRECISIONS),
    )
    parser.set_defaults(func=run_slice)


def add_callers_parser(subparsers):
    """Add callers subcommand to the argument parser."""
    parser = subparsers.add_parser(
        "callers", help="Forward slice from every call to a method"
    )
    _addCommonOptions(parser)
    parser.add_argument("callee", help="Signature of the called method")
    parser.add_argument(
        "--analysis",
        "-a",
        required=True,
        help="Analysis precision (known: %s)" % ", ".join(PRECISIONS),
    )
    parser.add_argument(
        "--best-effort", action="store_true", help="Skip calls to void methods instead of failing"
    )
    parser.add_argument(
        "--workers", "-j", type=int, default=1, help="Threads slicing independent call sites"
    )
    parser.set_defaults(func=run_callers)
