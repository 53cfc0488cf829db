"""
Person scaffolding.

Creates a new person directory populated with starter files:

    cv_params.toml          rendered from {templates}/person_template.toml ({{ name }})
    experiences_{lang}.typ  copied from {templates}/experiences_template.typ, one per language
    README.md               editing instructions

Built-in starters are used when the template root does not provide them.
"""

from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from cvgen.contexts.intake.languages import SUPPORTED_LANGUAGES
from cvgen.contexts.intake.persons import (
    LOGO_FILE,
    PROFILE_DATA_FILE,
    PROFILE_IMAGE_FILE,
    content_filename,
    ensure_safe_person_id,
    normalize_person_name,
)
from cvgen.contexts.templating.logger import _log_info, _log_warning
from cvgen.exceptions import PersonExists

PERSON_TEMPLATE_FILE = "person_template.toml"
EXPERIENCES_TEMPLATE_FILE = "experiences_template.typ"
README_FILE = "README.md"

DEFAULT_PERSON_TEMPLATE = """[personal]
name = "{{ name }}"
title = ""
summary = ""
email = ""
phone = ""
linkedin = ""
website = ""

[styling]
primary_color = "#14A4E6"
secondary_color = "#757575"

[content]
show_picture = true
show_contact = true
"""

DEFAULT_EXPERIENCES = """#import "template.typ": *

#let get_work_experience() = [
  = Professional Experience

  == Current Company
  #dated_experience(
    "Job Title",
    date: "Start Date - Present",
    description: "Short description of the company and its industry",
    content: [
      #experience_details("Key responsibility or achievement, with metrics where possible")
    ]
  )
]
"""

README_TEMPLATE = """# {{ name }} CV Data

Add your profile image as `{{ image }}` in this directory.
Add your company logo as `{{ logo }}` (optional).

Edit the following files:
- `{{ profile }}` - Personal information, skills, and key insights
- `experiences_*.typ` - Work experience for each language

## Available Languages
{% for lang, filename in contents -%}
- {{ lang }}: {{ filename }}
{% endfor %}"""


class PersonScaffolder:
    """
    Renders starter files for new persons.

    Only person_template.toml and the README go through Jinja2; experience
    files are copied verbatim since Typst markup may contain '{{'.
    """

    def __init__(self, templates_dir: Path):
        self.templates_dir = Path(templates_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            keep_trailing_newline=True,
        )

    def render_profile(self, name: str) -> str:
        try:
            template = self.env.get_template(PERSON_TEMPLATE_FILE)
        except TemplateNotFound:
            _log_warning(f"{PERSON_TEMPLATE_FILE} not found in {self.templates_dir}, using built-in profile")
            template = self.env.from_string(DEFAULT_PERSON_TEMPLATE)
        return template.render(name=name)

    def experiences(self) -> str:
        path = self.templates_dir / EXPERIENCES_TEMPLATE_FILE
        if path.is_file():
            return path.read_text(encoding="utf-8")
        _log_warning(f"{EXPERIENCES_TEMPLATE_FILE} not found in {self.templates_dir}, using built-in content")
        return DEFAULT_EXPERIENCES

    def render_readme(self, name: str) -> str:
        return self.env.from_string(README_TEMPLATE).render(
            name=name,
            image=PROFILE_IMAGE_FILE,
            logo=LOGO_FILE,
            profile=PROFILE_DATA_FILE,
            contents=[(lang, content_filename(lang)) for lang in SUPPORTED_LANGUAGES],
        )


def create_person(
    data_dir: Path,
    templates_dir: Path,
    person: str,
    display_name: Optional[str] = None,
) -> Path:
    """
    Scaffold a new person directory.

    Args:
        data_dir: Person-data root (tenant directory)
        templates_dir: Template root holding the starter templates
        person: Raw person name ("Jane Doe" becomes "jane-doe")
        display_name: Name written into cv_params.toml (default: the raw name)

    Returns:
        The created person directory

    Raises:
        InvalidPerson: If the name normalizes to an unsafe identifier
        PersonExists: If the directory already exists
    """
    person_id = ensure_safe_person_id(normalize_person_name(person))
    directory = Path(data_dir) / person_id
    name = display_name or person.strip()

    scaffolder = PersonScaffolder(templates_dir)
    # Render before touching the filesystem so template errors leave nothing behind
    profile = scaffolder.render_profile(name)
    experiences = scaffolder.experiences()
    readme = scaffolder.render_readme(name)

    try:
        directory.mkdir(parents=True)
    except FileExistsError as e:
        raise PersonExists(person_id, directory) from e

    created: List[str] = [PROFILE_DATA_FILE]
    (directory / PROFILE_DATA_FILE).write_text(profile, encoding="utf-8")
    for lang in SUPPORTED_LANGUAGES:
        filename = content_filename(lang)
        (directory / filename).write_text(experiences, encoding="utf-8")
        created.append(filename)
    (directory / README_FILE).write_text(readme, encoding="utf-8")
    created.append(README_FILE)

    _log_info(f"Created person {person_id} at {directory} ({', '.join(created)})")
    return directory
