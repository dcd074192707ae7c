"""
Slicing configuration.

A SliceConfig collects every knob of one slicing run: the dependence
options, the statement budget, how criteria are resolved, how many worker
threads slice independent seeds, and which classes are excluded from the
loaded model. It is built from parsed command line arguments or from a
plain mapping (for example a section of a JSON or TOML file).
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from flowslice.slicer.options import ControlDependenceOptions, DataDependenceOptions


@dataclass
class SliceConfig:
    """
    Configuration of a slicing run.

    Attributes:
        data: Data dependence option (default FULL)
        control: Control dependence option (default FULL)
        max_statements: Abort with SliceTruncated past this many statements
        best_effort: Skip void calls when collecting every caller
        workers: Threads used to slice independent seeds
        exclusions: Path of an exclusions file; None selects the packaged one
        use_exclusions: If False, no classes are excluded
    """
    data: DataDependenceOptions = DataDependenceOptions.FULL
    control: ControlDependenceOptions = ControlDependenceOptions.FULL
    max_statements: Optional[int] = None
    best_effort: bool = False
    workers: int = 1
    exclusions: Optional[Union[str, Path]] = None
    use_exclusions: bool = True

    def __post_init__(self):
        # Accept option names as well as members
        self.data = DataDependenceOptions.parse(self.data)
        self.control = ControlDependenceOptions.parse(self.control)
        if self.max_statements is not None:
            self.max_statements = int(self.max_statements)
            if self.max_statements < 1:
                raise ValueError("max_statements must be positive, got %d" % self.max_statements)
        self.workers = int(self.workers)
        if self.workers < 1:
            raise ValueError("workers must be at least 1, got %d" % self.workers)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SliceConfig":
        """
        Build a configuration from a mapping; unknown keys are rejected.

        Raises:
            ValueError: For an unknown key or an invalid option value
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError("unknown configuration key(s): %s" % ", ".join(unknown))
        return cls(**dict(values))

    @classmethod
    def from_args(cls, args) -> "SliceConfig":
        """Build a configuration from an argparse namespace."""
        return cls(
            data=getattr(args, "data", DataDependenceOptions.FULL),
            control=getattr(args, "control", ControlDependenceOptions.FULL),
            max_statements=getattr(args, "max_statements", None),
            best_effort=getattr(args, "best_effort", False),
            workers=getattr(args, "workers", 1),
            exclusions=getattr(args, "exclusions", None),
            use_exclusions=not getattr(args, "no_exclusions", False),
        )
