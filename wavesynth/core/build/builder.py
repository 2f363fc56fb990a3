"""
Asset Builder
=============

Renders the web front-end from Jinja2 templates into a directory of static
assets ready to be copied into the server root.

Release builds minify the script and stylesheet and give them content-hashed
file names; debug builds keep plain names and show a warning banner.
"""

from typing import Any, Dict, Optional
from pathlib import Path
import hashlib
import re
import shutil
import subprocess

import jinja2

from wavesynth import __version__
from wavesynth.config.logging import get_logger
from wavesynth.models.schemas import AssetInfo, BuildManifest, BuildMode

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
MANIFEST_NAME = "manifest.json"
API_BASE = "/api/v1"

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)


class AssetBuildError(Exception):
    """Exception raised when the asset build fails."""

    pass


def resolve_git_hash(override: Optional[str] = None, cwd: Optional[Path] = None) -> str:
    """
    Return the commit hash stamped into the build.

    Args:
        override: Hash to use instead of asking git
        cwd: Working directory for the git call

    Raises:
        AssetBuildError: If git cannot be called or reports an error
    """
    if override:
        return override.strip()

    try:
        output = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise AssetBuildError(f"calling git failed: {e}")

    git_hash = output.stdout.strip()
    if not git_hash:
        raise AssetBuildError("calling git failed: empty output")
    return git_hash


def minify(source: str) -> str:
    """Drop block comments, whole-line // comments, indentation and blank lines."""
    source = _BLOCK_COMMENT.sub("", source)
    lines = []
    for line in source.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("//"):
            continue
        lines.append(stripped)
    return "\n".join(lines) + "\n"


def _digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class AssetBuilder:
    """Jinja2-based front-end builder."""

    def __init__(
        self,
        mode: BuildMode = BuildMode.RELEASE,
        git_hash: Optional[str] = None,
        repository_url: Optional[str] = None,
        template_dir: Path = TEMPLATE_DIR,
    ) -> None:
        self.mode = mode
        self.git_hash = git_hash
        self.repository_url = repository_url.rstrip("/") if repository_url else None
        self.logger: Any = logger.bind(builder="jinja2", mode=mode.value)
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html"]),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
        )

    @property
    def release(self) -> bool:
        return self.mode == BuildMode.RELEASE

    def _render(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            return self.env.get_template(template_name).render(**context)
        except jinja2.TemplateError as e:
            raise AssetBuildError(f"Failed to render {template_name}: {e}")

    def _asset_name(self, stem: str, suffix: str, content: bytes) -> str:
        if not self.release:
            return f"{stem}{suffix}"
        return f"{stem}-{_digest(content)[:8]}{suffix}"

    def _prepare_output(self, output_dir: Path) -> None:
        if output_dir.exists() and not output_dir.is_dir():
            raise AssetBuildError(f"Output path is not a directory: {output_dir}")

        if output_dir.is_dir() and any(output_dir.iterdir()):
            # Only wipe directories a previous build produced
            if not (output_dir / MANIFEST_NAME).exists():
                raise AssetBuildError(
                    f"Refusing to overwrite non-empty directory without {MANIFEST_NAME}: "
                    f"{output_dir}"
                )
            shutil.rmtree(output_dir)

        output_dir.mkdir(parents=True, exist_ok=True)

    def build(self, output_dir: Path) -> BuildManifest:
        """
        Build the front-end into ``output_dir``.

        Args:
            output_dir: Destination directory, replaced if it holds a previous build

        Returns:
            Manifest describing the written files
        """
        git_hash = resolve_git_hash(self.git_hash)
        self.logger.info("Building assets", output_dir=str(output_dir), git_hash=git_hash)

        context: Dict[str, Any] = {
            "api_base": API_BASE,
            "debug": not self.release,
            "version": __version__,
            "git_hash": git_hash,
            "commit_url": f"{self.repository_url}/commit/{git_hash}"
            if self.repository_url
            else None,
        }

        style = self._render("style.css", context)
        script = self._render("app.js", context)
        if self.release:
            style = minify(style)
            script = minify(script)

        style_bytes = style.encode("utf-8")
        script_bytes = script.encode("utf-8")
        style_name = self._asset_name("style", ".css", style_bytes)
        script_name = self._asset_name("app", ".js", script_bytes)

        index = self._render(
            "index.html", {**context, "style_href": style_name, "script_src": script_name}
        )

        files: Dict[str, bytes] = {
            "index.html": index.encode("utf-8"),
            style_name: style_bytes,
            script_name: script_bytes,
        }

        self._prepare_output(output_dir)

        manifest = BuildManifest(
            mode=self.mode,
            version=__version__,
            git_hash=git_hash,
            entrypoints={"html": "index.html", "script": script_name, "style": style_name},
        )
        try:
            for name, data in files.items():
                (output_dir / name).write_bytes(data)
                manifest.files[name] = AssetInfo(size=len(data), sha256=_digest(data))
            (output_dir / MANIFEST_NAME).write_text(
                manifest.model_dump_json(indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise AssetBuildError(f"Failed to write assets: {e}")

        self.logger.info(
            "Assets built",
            files=len(manifest.files),
            total_size=sum(info.size for info in manifest.files.values()),
        )
        return manifest


def build_assets(
    output_dir: Path,
    release: bool = True,
    git_hash: Optional[str] = None,
    repository_url: Optional[str] = None,
) -> BuildManifest:
    """Build the front-end; see AssetBuilder.build()."""
    builder = AssetBuilder(
        mode=BuildMode.RELEASE if release else BuildMode.DEBUG,
        git_hash=git_hash,
        repository_url=repository_url,
    )
    return builder.build(Path(output_dir))


def read_manifest(directory: Path) -> Optional[BuildManifest]:
    """Load the manifest of a previous build, None when absent or unreadable."""
    path = Path(directory) / MANIFEST_NAME
    if not path.is_file():
        return None
    try:
        return BuildManifest.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Build manifest unreadable", path=str(path), error=str(e))
        return None
