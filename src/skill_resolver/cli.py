"""CLI for skill-resolver: install, resolve, inspect skills and commands."""

import argparse
import json
import platform
import sys
import tomllib
from importlib.metadata import version as pkg_version
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .commands import CommandLoader
from .config import Config, load_config
from .errors import InstallError, SkillResolverError
from .installer import EntryState, Installer, InstallMode
from .logging_config import setup_logging
from .skills import SkillLoader, SkillResolver, render_activation, render_catalog
from .skills.models import SKILL_FILENAME

STATE_STYLES = {
	EntryState.INSTALLED: "green",
	EntryState.MISSING: "dim",
	EntryState.MODIFIED: "yellow",
	EntryState.CONFLICT: "red",
	EntryState.BROKEN: "red",
	EntryState.ORPHANED: "yellow",
}


def _fail(console: Console, message: str) -> None:
	console.print(f"[red]Error:[/red] {escape(message)}")
	sys.exit(1)


def _truncate(text: str, max_len: int = 80) -> str:
	text = " ".join(text.split())
	if len(text) <= max_len:
		return text
	return text[:max_len - 3] + "..."


def cmd_list(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""List discovered skills."""
	loader = SkillLoader(config.skill_roots)
	skills = loader.list_skills()

	if args.json:
		print(json.dumps({"skills": skills, "total": len(skills)}, indent=2))
		return

	if not skills:
		console.print("[dim]No skills found.[/dim]")
		for root in loader.roots:
			console.print(f"[dim]  searched {root}[/dim]")
		return

	table = Table(title=f"Skills ({len(skills)})")
	table.add_column("Name", style="cyan")
	table.add_column("Description")
	table.add_column("Location", style="dim")
	for skill in skills:
		table.add_row(skill["name"], escape(_truncate(skill["description"])), skill["path"])
	console.print(table)


def cmd_catalog(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""Print the skill catalog block for a system prompt."""
	loader = SkillLoader(config.skill_roots)
	print(render_catalog(loader.discover().values()))


def cmd_show(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""Show a skill's full instructions."""
	loader = SkillLoader(config.skill_roots)
	try:
		skill = loader.load_skill(args.name)
		resources = loader.load_resources(skill) if args.resources else []
	except SkillResolverError as e:
		_fail(console, str(e))
		return

	if args.prompt:
		print(render_activation(skill, resources))
		return

	console.print(f"[bold cyan]{skill.name}[/bold cyan]")
	console.print(escape(skill.description))
	console.print(f"[dim]{skill.path}[/dim]")
	if skill.metadata.allowed_tools:
		console.print(f"Allowed tools: {escape(', '.join(skill.metadata.allowed_tools))}")
	if skill.resources:
		console.print(f"References: {', '.join(skill.resources)}")
	files = loader.list_resource_files(skill)
	if files:
		console.print(f"Bundled files: {', '.join(files)}")
	console.print()
	print(skill.instructions)
	for resource in resources:
		console.print()
		console.print(f"[bold]--- {resource.relative_path} ({resource.kind.value}) ---[/bold]")
		if resource.is_binary:
			console.print(f"[dim]<binary, {len(resource.data)} bytes>[/dim]")
		else:
			print(resource.content)


def cmd_resolve(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""Resolve a request to a skill."""
	request = " ".join(args.request)
	resolver = SkillResolver.from_config(config)
	resolution = resolver.resolve(request, load_resources=args.load_resources)

	if args.json:
		print(json.dumps(resolution.to_dict(), indent=2))
	elif args.prompt and resolution.selected:
		print(render_activation(resolution.skill, resolution.resources, request=request))
	elif resolution.selected:
		label = " [yellow](ambiguous)[/yellow]" if resolution.ambiguous else ""
		console.print(
			f"Selected [bold cyan]{resolution.skill_name}[/bold cyan] "
			f"(score {resolution.score:.2f}){label}"
		)
		console.print(f"[dim]{escape(resolution.reason)}[/dim]")
		if len(resolution.candidates) > 1:
			others = ", ".join(f"{c.name} ({c.score:.2f})" for c in resolution.candidates[1:])
			console.print(f"[dim]Other candidates: {others}[/dim]")
	elif resolution.error:
		console.print(f"[red]Skill load failed:[/red] {escape(resolution.error)}")
	else:
		console.print("No skill selected.")

	if resolution.error:
		sys.exit(1)


def cmd_commands(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""List discovered commands."""
	commands = CommandLoader(config.command_roots).list_commands()

	if args.json:
		print(json.dumps({"commands": commands, "total": len(commands)}, indent=2))
		return

	if not commands:
		console.print("[dim]No commands found.[/dim]")
		return

	table = Table(title=f"Commands ({len(commands)})")
	table.add_column("Command", style="cyan")
	table.add_column("Arguments")
	table.add_column("Description")
	for cmd in commands:
		table.add_row(f"/{cmd['name']}", escape(cmd["argument_hint"] or ""), escape(_truncate(cmd["description"])))
	console.print(table)


def cmd_run_command(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""Render a command's prompt with arguments substituted."""
	loader = CommandLoader(config.command_roots)
	try:
		command = loader.get_command(args.name)
	except SkillResolverError as e:
		_fail(console, str(e))
		return
	print(command.render(args.arguments))


def cmd_new(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""Create a skill template."""
	root = config.skills_dir if args.user else config.project_skills_dir
	loader = SkillLoader(config.skill_roots)
	try:
		skill_file = loader.create_skill_template(args.name, root)
	except (ValueError, FileExistsError) as e:
		_fail(console, str(e))
		return
	console.print(f"Created {skill_file}")


def _installer(args: argparse.Namespace, config: Config) -> Installer:
	mode = InstallMode.SYMLINK if getattr(args, "symlink", False) else InstallMode.COPY
	source = Path(args.source) if getattr(args, "source", None) else Path.cwd()
	return Installer.from_config(config, source, mode)


def cmd_install(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""Install skills and commands from a source tree."""
	installer = _installer(args, config)
	try:
		report = installer.install()
	except InstallError as e:
		_fail(console, str(e))
		return

	for entry in report.installed:
		console.print(f"  [green]installed[/green] {entry.kind} {entry.name} -> {entry.dest}")
	for entry in report.updated:
		console.print(f"  [cyan]updated[/cyan]   {entry.kind} {entry.name}")
	for entry in report.skipped:
		console.print(f"  [yellow]skipped[/yellow]   {entry.kind} {entry.name} ({entry.dest} exists)")
	console.print(
		f"{len(report.installed)} installed, {len(report.updated)} updated, "
		f"{len(report.skipped)} skipped ({installer.mode.value})"
	)


def cmd_uninstall(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""Remove everything a previous install created."""
	try:
		report = _installer(args, config).uninstall()
	except InstallError as e:
		_fail(console, str(e))
		return

	if not report.removed:
		console.print("Nothing to uninstall.")
		return
	for entry in report.removed:
		console.print(f"  [red]removed[/red] {entry.kind} {entry.name}")
	console.print(f"{len(report.removed)} removed")


def cmd_status(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""Show install status of each source entry."""
	try:
		statuses = _installer(args, config).status()
	except InstallError as e:
		_fail(console, str(e))
		return

	if not statuses:
		console.print("[dim]No skills/ or commands/ entries found and nothing installed.[/dim]")
		return

	table = Table(title="Install status")
	table.add_column("Kind")
	table.add_column("Name", style="cyan")
	table.add_column("State")
	table.add_column("Destination", style="dim")
	for status in statuses:
		style = STATE_STYLES[status.state]
		table.add_row(
			status.entry.kind,
			status.entry.name,
			f"[{style}]{status.state.value}[/{style}]",
			str(status.entry.dest),
		)
	console.print(table)


def _check_config_toml(config_dir: Path) -> tuple[str, str | None]:
	"""Validate config.toml. Returns (status, issue_or_none)."""
	toml_path = config_dir / "config.toml"
	if not toml_path.exists():
		return "not found (optional)", None
	try:
		with open(toml_path, "rb") as f:
			tomllib.load(f)
		return "valid", None
	except tomllib.TOMLDecodeError as e:
		return f"INVALID ({e})", f"config.toml parse error: {e}"


def _check_skill_roots(roots: list[Path]) -> tuple[list[str], list[str]]:
	"""
	Count skills per root and collect folders that would be skipped.

	Returns (status_lines, issues).
	"""
	loader = SkillLoader(roots)
	loaded = loader.discover()
	lines: list[str] = []
	issues: list[str] = []
	for root in roots:
		if not root.is_dir():
			lines.append(f"{root}: not found")
			continue
		folders = [p for p in sorted(root.iterdir()) if p.is_dir() and not p.name.startswith(".")]
		good = [p for p in folders if p.name in loaded and loaded[p.name].path == p]
		lines.append(f"{root}: {len(good)} of {len(folders)} folders loaded")
		for folder in folders:
			if folder.name in loaded:
				continue
			if (folder / SKILL_FILENAME).is_file():
				issues.append(f"malformed skill metadata: {folder}")
			else:
				issues.append(f"no {SKILL_FILENAME}: {folder}")
	return lines, issues


def cmd_doctor(args: argparse.Namespace, config: Config, console: Console) -> None:
	"""Health check - verify configuration and installed skills."""
	console.print("skill-resolver doctor")
	console.print(f"{'=' * 40}")
	issues: list[str] = []

	py_ver = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
	console.print(f"  Python:       {py_ver}")
	console.print(f"  Platform:     {platform.system()} {platform.machine()}")
	console.print()

	console.print("  Core deps:")
	for dep in ["PyYAML", "platformdirs", "rich"]:
		try:
			console.print(f"    {dep:22s} {pkg_version(dep)}")
		except Exception:
			console.print(f"    {dep:22s} NOT INSTALLED")
			issues.append(f"{dep} package not installed")
	console.print()

	console.print("  Config:")
	toml_status, toml_issue = _check_config_toml(config.config_dir)
	console.print(f"    config.toml:         {escape(toml_status)}")
	if toml_issue:
		issues.append(toml_issue)
	console.print(f"    manifest:            {'present' if config.manifest_path.exists() else 'none'}")
	console.print()

	console.print("  Skills:")
	lines, skill_issues = _check_skill_roots(config.skill_roots)
	for line in lines:
		console.print(f"    {line}")
	issues.extend(skill_issues)
	console.print()

	if issues:
		console.print(f"  {len(issues)} issue(s) found:")
		for issue in issues:
			console.print(f"    - {escape(issue)}")
		sys.exit(1)
	else:
		console.print("  All checks passed.")


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="skill-resolver",
		description="Discover, match and install agent skills and commands",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
	subparsers = parser.add_subparsers(dest="command")

	# list
	list_parser = subparsers.add_parser("list", help="List skills (metadata only)")
	list_parser.add_argument("--json", action="store_true", help="JSON output")
	list_parser.set_defaults(func=cmd_list)

	# catalog
	catalog_parser = subparsers.add_parser("catalog", help="Print the skill catalog prompt block")
	catalog_parser.set_defaults(func=cmd_catalog)

	# show
	show_parser = subparsers.add_parser("show", help="Show a skill's instructions")
	show_parser.add_argument("name", help="Skill name")
	show_parser.add_argument("--resources", action="store_true", help="Also load referenced resources")
	show_parser.add_argument("--prompt", action="store_true", help="Print as an activation prompt")
	show_parser.set_defaults(func=cmd_show)

	# resolve
	resolve_parser = subparsers.add_parser("resolve", help="Pick the skill for a request")
	resolve_parser.add_argument("request", nargs="+", help="Request text")
	resolve_parser.add_argument("--load-resources", action="store_true", help="Load referenced resources")
	resolve_parser.add_argument("--prompt", action="store_true", help="Print the activation prompt")
	resolve_parser.add_argument("--json", action="store_true", help="JSON output")
	resolve_parser.set_defaults(func=cmd_resolve)

	# commands
	commands_parser = subparsers.add_parser("commands", help="List commands")
	commands_parser.add_argument("--json", action="store_true", help="JSON output")
	commands_parser.set_defaults(func=cmd_commands)

	# run-command
	run_parser = subparsers.add_parser("run-command", help="Render a command prompt")
	run_parser.add_argument("name", help="Command name (e.g. review or git:commit)")
	run_parser.add_argument("arguments", nargs=argparse.REMAINDER, help="Command arguments")
	run_parser.set_defaults(func=cmd_run_command)

	# new
	new_parser = subparsers.add_parser("new", help="Create a skill template")
	new_parser.add_argument("name", help="Skill name (lowercase, hyphenated)")
	new_scope = new_parser.add_mutually_exclusive_group()
	new_scope.add_argument("--project", action="store_true", help="Create in the project skills dir (default)")
	new_scope.add_argument("--user", action="store_true", help="Create in the user skills dir")
	new_parser.set_defaults(func=cmd_new)

	# install / uninstall / status
	for name, func, help_text in [
		("install", cmd_install, "Install skills and commands from a source tree"),
		("uninstall", cmd_uninstall, "Remove what install created"),
		("status", cmd_status, "Show install status"),
	]:
		sub = subparsers.add_parser(name, help=help_text)
		sub.add_argument("--source", type=str, default=None, help="Source tree (default: current directory)")
		if name == "install":
			sub.add_argument("--symlink", action="store_true", help="Symlink instead of copying")
		sub.set_defaults(func=func)

	# doctor
	doctor_parser = subparsers.add_parser("doctor", help="Health check")
	doctor_parser.set_defaults(func=cmd_doctor)

	return parser


def main(argv: list[str] | None = None) -> None:
	"""CLI entry point."""
	parser = build_parser()
	args = parser.parse_args(argv)

	if not args.command:
		parser.print_help()
		sys.exit(1)

	config = load_config()
	setup_logging(level="DEBUG" if args.verbose else None, log_dir=config.log_dir)
	args.func(args, config, Console())
