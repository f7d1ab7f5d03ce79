#region Imports
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from termlytic.config.settings import ADDITIONAL_HISTORY_FILES, get_history_candidates
from termlytic.models.file_fingerprint import FileFingerprint
from termlytic.models.history_entry import BASH, FISH, SUPPORTED_SHELLS, ZSH
#endregion


logger = logging.getLogger(__name__)


#region Classes


class HistoryPathResolver:
    """
    Locates shell history files.

    Results are computed once per instance, so a resolver gives stable
    answers for the lifetime of the process that owns it.
    """

    def __init__(
        self,
        home: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the resolver.

        Args:
            home: Home directory (defaults to the user's home)
            environ: Environment mapping (defaults to os.environ)
            overrides: Explicit shell -> history path mapping, wins over detection
        """
        self.home = home if home is not None else Path.home()
        self.environ = dict(os.environ if environ is None else environ)
        self.overrides = {shell: Path(path).expanduser() for shell, path in (overrides or {}).items()}
        self._current_shell: Optional[str] = None
        self._resolved: dict[str, Optional[Path]] = {}

    @property
    def current_shell(self) -> str:
        if self._current_shell is None:
            self._current_shell = self.detect_current_shell()
        return self._current_shell

    def detect_current_shell(self) -> str:
        """
        Detect the user's login shell from $SHELL, then $_.

        Returns:
            Shell name; 'zsh' when nothing matches
        """
        for variable in ("SHELL", "_"):
            value = self.environ.get(variable, "")
            for shell in (ZSH, BASH, FISH):
                if shell in value:
                    return shell
        return ZSH

    def shell_order(self) -> list[str]:
        """Supported shells with the detected current shell first."""
        current = self.current_shell
        return [current] + [shell for shell in SUPPORTED_SHELLS if shell != current]

    def list_candidate_paths(self, shell: str) -> list[Path]:
        """
        All locations considered for a shell, most preferred first.

        Args:
            shell: Shell name

        Returns:
            Candidate paths (override first when configured)
        """
        candidates = get_history_candidates(shell, self.home, self.environ)
        if shell in self.overrides:
            candidates.insert(0, self.overrides[shell])
        return candidates

    def resolve_history_path(self, shell: str) -> Optional[Path]:
        """
        Pick the history file for a shell.

        An override always wins; otherwise the first existing candidate,
        falling back to the first candidate when none exist yet.

        Args:
            shell: Shell name

        Returns:
            Path, or None for an unsupported shell
        """
        if shell in self._resolved:
            return self._resolved[shell]

        path: Optional[Path] = None
        if shell in self.overrides:
            path = self.overrides[shell]
        else:
            candidates = self.list_candidate_paths(shell)
            path = next((c for c in candidates if c.is_file()), candidates[0] if candidates else None)

        self._resolved[shell] = path
        logger.debug("Resolved %s history file: %s", shell, path)
        return path

    def history_files(self) -> dict[str, Optional[Path]]:
        """Resolved history file per supported shell."""
        return {shell: self.resolve_history_path(shell) for shell in SUPPORTED_SHELLS}

    def get_all_file_status(self) -> dict:
        """
        Current status of all history files.

        Includes the configured file for every shell plus any other common
        history file found in the home directory.

        Returns:
            Dictionary with 'configured', 'detected' and 'summary' sections
        """
        status = {
            "configured": {},
            "detected": {},
            "summary": {"totalFiles": 0, "existingFiles": 0, "readableFiles": 0},
        }

        configured_paths = set()
        for shell, path in self.history_files().items():
            info = _file_info(path)
            status["configured"][shell] = info
            configured_paths.add(path)
            status["summary"]["totalFiles"] += 1
            if info["exists"]:
                status["summary"]["existingFiles"] += 1
            if info["readable"]:
                status["summary"]["readableFiles"] += 1

        for relative in ADDITIONAL_HISTORY_FILES:
            extra = self.home / relative
            if extra in configured_paths:
                continue
            info = _file_info(extra)
            if info["exists"]:
                status["detected"][str(extra)] = info

        logger.info("File status summary: %s", status["summary"])
        return status

    def diagnose(self) -> dict:
        """
        Inspect every known history location to explain missing data.

        Returns:
            Dictionary with 'environment', 'files' and 'recommendations'
        """
        diagnosis = {
            "environment": {
                "shell": self.environ.get("SHELL"),
                "histfile": self.environ.get("HISTFILE"),
                "histsize": self.environ.get("HISTSIZE"),
                "histfilesize": self.environ.get("HISTFILESIZE"),
                "home": str(self.home),
                "user": self.environ.get("USER") or self.environ.get("USERNAME"),
                "detectedShell": self.current_shell,
            },
            "files": {},
            "recommendations": [],
        }

        sources: list[tuple[Path, str]] = []
        if self.environ.get("HISTFILE"):
            sources.append((Path(self.environ["HISTFILE"]).expanduser(), "HISTFILE env var"))
        sources.extend([
            (self.home / ".zsh_history", "default zsh"),
            (self.home / ".bash_history", "default bash"),
            (self.home / ".history", "generic history"),
            (self.home / ".zhistory", "alternative zsh"),
            (self.home / ".local" / "share" / "fish" / "fish_history", "fish default"),
            (self.home / ".config" / "fish" / "fish_history", "fish alternative"),
            (self.home / ".sh_history", "sh history"),
        ])
        for shell, path in self.overrides.items():
            sources.insert(0, (path, f"{shell} override"))

        for path, source in sources:
            info = _file_info(path)
            line_count = _count_lines(path) if info["exists"] else 0
            diagnosis["files"][str(path)] = {
                **info,
                "source": source,
                "lineCount": line_count,
                "isEmpty": line_count == 0,
            }

        existing = [
            (path, info) for path, info in diagnosis["files"].items()
            if info["exists"] and info["lineCount"] > 0
        ]
        recommendations = diagnosis["recommendations"]
        if not existing:
            recommendations.append("No shell history files found. Shell history may be disabled or not configured.")
            recommendations.append("Check if HISTFILE, HISTSIZE environment variables are set correctly.")
        else:
            recommendations.append(f"Found {len(existing)} history file(s) with data.")
            for path, info in existing:
                recommendations.append(f"Use {path} ({info['lineCount']} lines, {info['source']})")

        if self.current_shell == ZSH and not self.environ.get("HISTFILE"):
            recommendations.append("Consider setting HISTFILE environment variable for zsh.")

        return diagnosis


#endregion


#region Functions


def _file_info(path: Optional[Path]) -> dict:
    fingerprint = FileFingerprint.capture(path)
    readable = path is not None and fingerprint.exists and os.access(path, os.R_OK)
    return {
        **fingerprint.to_dict(),
        "path": str(path) if path is not None else None,
        "readable": readable,
    }


def _count_lines(path: Path) -> int:
    try:
        with open(path, "rb") as f:
            return sum(1 for _ in f)
    except OSError:
        return 0


#endregion
