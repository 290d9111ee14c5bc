"""
Installer - copy or symlink skills and commands into the user directory.

Source layout:
	<source>/skills/<skill-name>/SKILL.md
	<source>/commands/<command>.md

Every path created by install is recorded in a JSON manifest so uninstall
removes exactly those paths and nothing the user already had.
"""

import filecmp
import json
import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .config import Config
from .errors import InstallError

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1


class InstallMode(str, Enum):
	COPY = "copy"
	SYMLINK = "symlink"


class EntryState(str, Enum):
	"""Status of one source entry relative to its destination."""
	INSTALLED = "installed"
	MISSING = "missing"
	MODIFIED = "modified"
	CONFLICT = "conflict"
	BROKEN = "broken"
	ORPHANED = "orphaned"


@dataclass(frozen=True)
class InstallEntry:
	kind: str  # "skill" or "command"
	name: str
	source: Path
	dest: Path


@dataclass
class InstallReport:
	installed: list[InstallEntry] = field(default_factory=list)
	updated: list[InstallEntry] = field(default_factory=list)
	skipped: list[InstallEntry] = field(default_factory=list)
	removed: list[InstallEntry] = field(default_factory=list)

	@property
	def changed(self) -> bool:
		return bool(self.installed or self.updated or self.removed)


@dataclass(frozen=True)
class EntryStatus:
	entry: InstallEntry
	state: EntryState


class Installer:
	"""
	Installs a source tree of skills and commands.

	Usage:
		installer = Installer(Path("./my-skills"), config.skills_dir,
			config.commands_dir, config.manifest_path)
		installer.install()
		installer.status()
		installer.uninstall()
	"""

	def __init__(
		self,
		source: Path | str,
		skills_dest: Path | str,
		commands_dest: Path | str,
		manifest_path: Path | str,
		mode: InstallMode | str = InstallMode.COPY,
	):
		self.source = Path(source).expanduser()
		self.skills_dest = Path(skills_dest).expanduser()
		self.commands_dest = Path(commands_dest).expanduser()
		self.manifest_path = Path(manifest_path)
		self.mode = InstallMode(mode)

	@classmethod
	def from_config(
		cls,
		config: Config,
		source: Path | str,
		mode: InstallMode | str = InstallMode.COPY,
	) -> "Installer":
		return cls(source, config.skills_dir, config.commands_dir, config.manifest_path, mode)

	def source_entries(self) -> list[InstallEntry]:
		"""Skills and commands found in the source tree."""
		entries = []
		skills_src = self.source / "skills"
		if skills_src.is_dir():
			for path in sorted(skills_src.iterdir()):
				if path.is_dir() and not path.name.startswith("."):
					entries.append(InstallEntry("skill", path.name, path, self.skills_dest / path.name))

		commands_src = self.source / "commands"
		if commands_src.is_dir():
			for path in sorted(commands_src.iterdir()):
				if path.name.startswith("."):
					continue
				if path.is_dir() or path.suffix == ".md":
					entries.append(InstallEntry("command", path.stem, path, self.commands_dest / path.name))
		return entries

	def install(self) -> InstallReport:
		"""
		Copy or symlink every source entry into place.

		Entries that already exist and were not created by a previous install
		are left untouched and reported as skipped. Re-running is idempotent.

		Raises:
			InstallError: source tree missing/empty, or the previous install
				used a different mode, or an entry could not be placed (the
				manifest still records what was created before the failure)
		"""
		if not self.source.is_dir():
			raise InstallError(f"Source directory not found: {self.source}")

		entries = self.source_entries()
		if not entries:
			raise InstallError(f"No skills/ or commands/ entries under {self.source}")

		manifest = self._read_manifest()
		if manifest and manifest.get("mode") != self.mode.value:
			raise InstallError(
				f"Already installed with mode '{manifest.get('mode')}'; uninstall first"
			)

		created_dirs: list[str] = list(manifest.get("created_dirs", [])) if manifest else []
		recorded = {e["dest"]: e for e in manifest.get("entries", [])} if manifest else {}

		report = InstallReport()
		try:
			for entry in entries:
				dest_key = str(entry.dest)
				exists = entry.dest.exists() or entry.dest.is_symlink()

				if exists and dest_key not in recorded:
					logger.warning(f"Skipping {entry.kind} '{entry.name}': {entry.dest} already exists")
					report.skipped.append(entry)
					continue

				for created in _make_parents(entry.dest.parent):
					if str(created) not in created_dirs:
						created_dirs.append(str(created))

				if exists:
					_remove(entry.dest)
					report.updated.append(entry)
				else:
					report.installed.append(entry)
				# Record first: a partially placed entry still belongs to the manifest
				recorded[dest_key] = {
					"kind": entry.kind,
					"name": entry.name,
					"source": str(entry.source),
					"dest": dest_key,
				}
				try:
					self._place(entry)
				except OSError as e:
					raise InstallError(f"Failed to install {entry.kind} '{entry.name}': {e}") from e
				logger.debug(f"Installed {entry.kind} '{entry.name}' -> {entry.dest}")
		finally:
			self._write_manifest({
				"version": MANIFEST_VERSION,
				"mode": self.mode.value,
				"source": str(self.source),
				"installed_at": datetime.now().isoformat(),
				"created_dirs": created_dirs,
				"entries": list(recorded.values()),
			})
		logger.info(
			f"Installed {len(report.installed)}, updated {len(report.updated)}, "
			f"skipped {len(report.skipped)}"
		)
		return report

	def uninstall(self) -> InstallReport:
		"""
		Remove everything recorded in the manifest.

		Directories created by install are removed when empty. Without a
		manifest this is a no-op.
		"""
		report = InstallReport()
		manifest = self._read_manifest()
		if not manifest:
			logger.info("Nothing to uninstall")
			return report

		for item in manifest.get("entries", []):
			entry = InstallEntry(item["kind"], item["name"], Path(item["source"]), Path(item["dest"]))
			if entry.dest.exists() or entry.dest.is_symlink():
				_remove(entry.dest)
				report.removed.append(entry)
				logger.debug(f"Removed {entry.dest}")

		# Deepest first
		for created in sorted(manifest.get("created_dirs", []), key=lambda p: len(Path(p).parts), reverse=True):
			path = Path(created)
			if path.is_dir() and not any(path.iterdir()):
				path.rmdir()

		self.manifest_path.unlink()
		logger.info(f"Uninstalled {len(report.removed)} entries")
		return report

	def status(self) -> list[EntryStatus]:
		"""Report the state of every source entry and every recorded entry."""
		manifest = self._read_manifest() or {}
		recorded = {e["dest"]: e for e in manifest.get("entries", [])}

		results = []
		seen = set()
		for entry in self.source_entries():
			seen.add(str(entry.dest))
			results.append(EntryStatus(entry, self._entry_state(entry, str(entry.dest) in recorded)))

		for dest, item in recorded.items():
			if dest in seen:
				continue
			entry = InstallEntry(item["kind"], item["name"], Path(item["source"]), Path(dest))
			results.append(EntryStatus(entry, EntryState.ORPHANED))

		return results

	def _entry_state(self, entry: InstallEntry, recorded: bool) -> EntryState:
		dest = entry.dest
		if dest.is_symlink() and not dest.exists():
			return EntryState.BROKEN
		if not dest.exists():
			return EntryState.MISSING
		if not recorded:
			return EntryState.CONFLICT
		if dest.is_symlink():
			same = dest.resolve() == entry.source.resolve()
		elif dest.is_dir():
			same = entry.source.is_dir() and _same_tree(entry.source, dest)
		else:
			same = entry.source.is_file() and filecmp.cmp(entry.source, dest, shallow=False)
		return EntryState.INSTALLED if same else EntryState.MODIFIED

	def _place(self, entry: InstallEntry) -> None:
		if self.mode == InstallMode.SYMLINK:
			entry.dest.symlink_to(entry.source.resolve(), target_is_directory=entry.source.is_dir())
		elif entry.source.is_dir():
			shutil.copytree(entry.source, entry.dest, symlinks=True)
		else:
			shutil.copy2(entry.source, entry.dest)

	def _read_manifest(self) -> dict | None:
		if not self.manifest_path.exists():
			return None
		try:
			data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
		except (json.JSONDecodeError, OSError) as e:
			raise InstallError(f"Install manifest unreadable: {self.manifest_path}: {e}") from e
		if not isinstance(data, dict):
			raise InstallError(f"Install manifest is not an object: {self.manifest_path}")
		return data

	def _write_manifest(self, data: dict) -> None:
		self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
		self.manifest_path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _make_parents(path: Path) -> list[Path]:
	"""mkdir -p, returning the directories that did not exist before (outermost first)."""
	missing = []
	current = path
	while not current.exists():
		missing.append(current)
		current = current.parent
	path.mkdir(parents=True, exist_ok=True)
	return list(reversed(missing))


def _remove(path: Path) -> None:
	if path.is_symlink() or path.is_file():
		path.unlink()
	elif path.is_dir():
		shutil.rmtree(path)


def _same_tree(left: Path, right: Path) -> bool:
	"""True when two directory trees hold the same files with the same content."""
	cmp = filecmp.dircmp(left, right)
	if cmp.left_only or cmp.right_only or cmp.funny_files:
		return False
	_, mismatch, errors = filecmp.cmpfiles(left, right, cmp.common_files, shallow=False)
	if mismatch or errors:
		return False
	return all(_same_tree(left / sub, right / sub) for sub in cmp.common_dirs)
