"""
Shared fixtures.

Integration tests drive the pipeline against a scripted fake compiler (a small
Python program run with the current interpreter) so no Typst install is
needed. The fake compiler accepts the same `compile <template> <output>
--input k=v` command line as typst and reacts to markers in the staged
experiences.typ:

    COMPILE_ERROR   print a diagnostic to stderr and exit 1
    SLOW_RENDER     sleep long enough to trip any test timeout
    NO_OUTPUT       exit 0 without writing the output file

Otherwise it writes a deterministic document: a PDF header followed by the
--input pairs and the contents of every staged file, sorted by name.
"""

import shlex
import shutil
import sys
from pathlib import Path

import pytest
from loguru import logger

from cvgen.config import Settings
from cvgen.contexts.generation.pipeline import DocumentPipeline
from cvgen.contexts.rendering import workspace as workspace_module

REPO_TEMPLATES = Path(__file__).resolve().parents[1] / "templates"

PERSON = "mohamed-bennekrouf"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + bytes(range(64))
LOGO_BYTES = b"\x89PNG\r\n\x1a\n" + b"keyteo-logo"

FAKE_COMPILER = r'''
import sys
import time
from pathlib import Path

args = sys.argv[1:]
if not args or args[0] != "compile":
    sys.stderr.write("error: expected 'compile' subcommand\n")
    sys.exit(2)

template, output = Path(args[1]), Path(args[2])
inputs = [args[i + 1] for i in range(3, len(args) - 1) if args[i] == "--input"]

if not template.is_file():
    sys.stderr.write(f"error: file not found: {template}\n")
    sys.exit(1)

content = Path("experiences.typ").read_text(encoding="utf-8")
if "COMPILE_ERROR" in content:
    sys.stderr.write("error: unexpected token\n  --> experiences.typ:1:1\n")
    sys.exit(1)
if "SLOW_RENDER" in content:
    time.sleep(30)
if "NO_OUTPUT" in content:
    sys.exit(0)

parts = [b"%PDF-1.7 fake\n", ("inputs: " + " ".join(inputs) + "\n").encode()]
for path in sorted(Path.cwd().iterdir()):
    if path.is_file() and path.suffix != ".pdf":
        parts.append(f"--- {path.name}\n".encode())
        parts.append(path.read_bytes())
        parts.append(b"\n")
output.write_bytes(b"".join(parts))
'''


@pytest.fixture(autouse=True)
def quiet_logger():
    """Drop loguru sinks a test may have installed (CLI sessions add stderr/file sinks)."""
    yield
    logger.remove()


@pytest.fixture
def fake_compiler(tmp_path) -> str:
    script = tmp_path / "fake_typst.py"
    script.write_text(FAKE_COMPILER, encoding="utf-8")
    return " ".join(shlex.quote(part) for part in (sys.executable, str(script)))


@pytest.fixture
def templates_dir(tmp_path) -> Path:
    directory = tmp_path / "templates"
    shutil.copytree(REPO_TEMPLATES, directory)
    (directory / "keyteo_logo.png").write_bytes(LOGO_BYTES)
    return directory


def write_person(data_dir: Path, person: str = PERSON, langs=("en", "fr"), picture: bool = True) -> Path:
    directory = data_dir / person
    directory.mkdir(parents=True)
    (directory / "cv_params.toml").write_text(
        '[personal]\nname = "Mohamed Bennekrouf"\ntitle = "Software Engineer"\n', encoding="utf-8"
    )
    for lang in langs:
        (directory / f"experiences_{lang}.typ").write_text(
            f'#let get_work_experience() = [= Experience ({lang})]\n', encoding="utf-8"
        )
    if picture:
        (directory / "profile.png").write_bytes(PNG_BYTES)
    return directory


@pytest.fixture
def data_dir(tmp_path) -> Path:
    directory = tmp_path / "data"
    write_person(directory)
    return directory


@pytest.fixture
def settings(tmp_path, data_dir, templates_dir, fake_compiler) -> Settings:
    return Settings(
        data_dir=str(data_dir),
        output_dir=str(tmp_path / "output"),
        templates_dir=str(templates_dir),
        workspace_root=str(tmp_path / "workspaces"),
        logs_path=str(tmp_path / "logs"),
        compiler=fake_compiler,
        compile_timeout=20.0,
        watch_interval=0.05,
        events_file=str(tmp_path / "logs" / "events.jsonl"),
    )


@pytest.fixture
def pipeline(settings) -> DocumentPipeline:
    return DocumentPipeline(settings)


def leftover_workspaces(settings: Settings):
    root = settings.workspace_base
    if not root.exists():
        return []
    return sorted(root.iterdir())


def fail_copy_of(monkeypatch, name: str) -> None:
    """Make workspace staging fail with OSError when copying into `name`."""
    real_copy = shutil.copy2

    def copy2(src, dst, *args, **kwargs):
        if Path(dst).name == name:
            raise OSError(28, "No space left on device")
        return real_copy(src, dst, *args, **kwargs)

    monkeypatch.setattr(workspace_module.shutil, "copy2", copy2)
