"""
pages.py - Turn records into page HTML

A builder knows, for one kind of page:
- which template file to read (and which blocks it regenerates)
- how to get its records out of the parsed sheet rows
- how to turn one record into template values

Every value that lands in page text goes through escape_html(); every
value that lands in an href/src goes through safe_url() first.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence
from urllib.parse import quote

from rostersync.artifacts import STUDENT_PAGE, TEACHER_DASHBOARD, ArtifactKind
from rostersync.config_utils import DashboardSettings
from rostersync.records import (
    FinishedActivity,
    Student,
    Teacher,
    map_students,
    map_teachers,
)
from rostersync.schema import ROSTER_SCHEMA, SheetSchema
from rostersync.security_utils import escape_html, json_for_script, safe_url
from rostersync.templating import BlockMarker, Template, read_template


DEFAULT_PHOTO = "https://via.placeholder.com/100x100?text=Student"

TEACHER_CONFIG_BLOCK = BlockMarker(
    name="TEACHER_CONFIGURATION",
    start="<!-- TEACHER CONFIGURATION -->",
    end="</script>",
)

STUDENT_TOKENS = (
    "STUDENT_NAME", "STUDENT_PHOTO", "ASSIGNED_TEACHER", "CONTRACT", "WORKPLACE",
    "EMAIL", "PHONE", "PHONE_NUMBER", "PHONE_NUMBER_CLEAN", "ROLE", "CLASS_LINK",
    "CLASS_LINK_ICON", "WHATSAPP", "WHATSAPP_LINK", "LEVEL", "LEARNING_OBJECTIVES",
    "VOCABULARY_URL", "FINISHED_ACTIVITIES", "FINISHED_ACTIVITIES_HTML",
    "NATIONALITY", "LOCATION",
)

TEACHER_TOKENS = ("TEACHER_NAME", "TOTAL_STUDENTS", "ACTIVE_CLASSES")


class PageBuilder:
    kind: ArtifactKind
    blocks: Sequence[BlockMarker] = ()

    def __init__(self, template_path: Path, schema: SheetSchema = ROSTER_SCHEMA):
        self.template_path = Path(template_path)
        self.schema = schema

    def load_template(self) -> Template:
        return read_template(self.template_path, self.blocks)

    def build_records(self, rows: Sequence[Sequence[str]]) -> list:
        raise NotImplementedError

    def values(self, record) -> Dict[str, str]:
        raise NotImplementedError

    def render(self, template: Template, record) -> str:
        return template.render(self.values(record))

    def describe(self, record) -> str:
        """Extra detail for the per-page log line"""
        return ""


# =============================================================================
# Student pages
# =============================================================================

NO_ACTIVITIES_HTML = (
    '<div style="text-align: center; color: #666; padding: 40px;">'
    "<p>No finished activities yet.</p></div>"
)

ACTIVITY_CARD_HTML = """
                <a href="{href}" target="_blank" rel="noopener noreferrer" style="display: block; text-decoration: none; background: rgba(255, 255, 255, 0.8); border: 1px solid rgba(0, 0, 0, 0.1); border-radius: 12px; padding: 20px; box-shadow: 0 2px 10px rgba(0, 0, 0, 0.05); transition: all 0.3s ease;">
                    <div style="display: flex; align-items: center; margin-bottom: 10px;">
                        <span style="color: #48bb78; font-size: 1.2rem; margin-right: 10px;">✓</span>
                        <h4 style="color: #2d3748; margin: 0; font-size: 1.1rem; font-weight: 600;">{title}</h4>
                        <span style="color: #4c51bf; font-size: 0.8rem; margin-left: 10px;">🔗 Click to open</span>
                    </div>
                    <p style="color: #4a5568; margin: 8px 0; font-size: 0.9rem; line-height: 1.4; word-break: break-all;">{text}</p>
                </a>
            """


def finished_activities_html(activities: List[FinishedActivity]) -> str:
    if not activities:
        return NO_ACTIVITIES_HTML
    cards = [
        ACTIVITY_CARD_HTML.format(
            href=escape_html(safe_url(activity.url)),
            title=escape_html(activity.title),
            text=escape_html(activity.url),
        )
        for activity in activities
    ]
    return '<div style="display: grid; gap: 15px;">' + "".join(cards) + "</div>"


class StudentPageBuilder(PageBuilder):
    kind = STUDENT_PAGE

    def __init__(
        self,
        template_path: Path,
        placeholder_photo: str = DEFAULT_PHOTO,
        schema: SheetSchema = ROSTER_SCHEMA,
    ):
        super().__init__(template_path, schema)
        self.placeholder_photo = placeholder_photo

    def build_records(self, rows: Sequence[Sequence[str]]) -> List[Student]:
        return map_students(rows, self.schema)

    def values(self, student: Student) -> Dict[str, str]:
        photo = student.image_url.strip() or self.placeholder_photo
        return {
            "STUDENT_NAME": escape_html(student.name),
            "STUDENT_PHOTO": escape_html(safe_url(photo)),
            "ASSIGNED_TEACHER": escape_html(student.assigned_teacher),
            "CONTRACT": escape_html(student.contract),
            "WORKPLACE": escape_html(student.workplace),
            "EMAIL": escape_html(student.email),
            "PHONE": escape_html(student.phone),
            "PHONE_NUMBER": escape_html(student.phone),
            "PHONE_NUMBER_CLEAN": student.phone_clean,
            "ROLE": escape_html(student.role),
            "CLASS_LINK": escape_html(safe_url(student.class_link)),
            "CLASS_LINK_ICON": student.class_link_icon,
            "WHATSAPP": escape_html(student.phone),
            "WHATSAPP_LINK": escape_html(safe_url(student.whatsapp_link)),
            "LEVEL": escape_html(student.level),
            "LEARNING_OBJECTIVES": escape_html(student.learning_objective),
            "VOCABULARY_URL": escape_html(safe_url(student.vocabulary_embed_url)),
            "FINISHED_ACTIVITIES": escape_html(student.finished_activities),
            "FINISHED_ACTIVITIES_HTML": finished_activities_html(student.activities),
            "NATIONALITY": escape_html(student.nationality),
            "LOCATION": escape_html(student.location),
        }


# =============================================================================
# Teacher dashboards
# =============================================================================

TEACHER_CONFIG_SCRIPT = """<!-- TEACHER CONFIGURATION -->
    <script>
        const TEACHER_CONFIG = {config};
    </script>"""


class TeacherDashboardBuilder(PageBuilder):
    kind = TEACHER_DASHBOARD
    blocks = (TEACHER_CONFIG_BLOCK,)

    def __init__(
        self,
        template_path: Path,
        sheet_edit_url: str = "",
        settings: Optional[DashboardSettings] = None,
        schema: SheetSchema = ROSTER_SCHEMA,
    ):
        super().__init__(template_path, schema)
        self.sheet_edit_url = sheet_edit_url
        self.settings = settings or DashboardSettings()

    def build_records(self, rows: Sequence[Sequence[str]]) -> List[Teacher]:
        return map_teachers(rows, self.schema)

    def platforms(self, teacher: Teacher) -> List[str]:
        return teacher.platforms or list(self.settings.default_platforms)

    def config(self, teacher: Teacher) -> Dict:
        """The TEACHER_CONFIG object the dashboard's scripts read at load time."""
        return {
            "teacherName": teacher.name,
            "teacherTitle": self.settings.teacher_title,
            "headerTitle": f"{teacher.name}'s Dashboard",
            "sheetUrl": self.sheet_edit_url,
            "profileImage": self.settings.avatar_url.format(name=quote(teacher.name)),
            "websiteUrl": self.settings.website_url,
            "websiteLogo": self.settings.website_logo,
            "tabs": {
                "home": {"show": True, "label": "Home"},
                "students": {"show": True, "label": "Students"},
                "invoicing": {"show": True, "label": "Invoicing"},
                "work": {"show": True, "label": "Call"},
            },
            "platforms": self.platforms(teacher),
            "githubPagesUrl": self.settings.pages_base_url,
            "totalStudents": teacher.total_students,
            "activeClasses": teacher.active_classes,
            "assignedTeacher": teacher.name,
        }

    def config_script(self, teacher: Teacher) -> str:
        config = json_for_script(self.config(teacher), indent=4)
        # Indent nested lines to sit inside the <script> element
        config = config.replace("\n", "\n        ")
        return TEACHER_CONFIG_SCRIPT.format(config=config)

    def values(self, teacher: Teacher) -> Dict[str, str]:
        return {
            TEACHER_CONFIG_BLOCK.name: self.config_script(teacher),
            "TEACHER_NAME": escape_html(teacher.name),
            "TOTAL_STUDENTS": str(teacher.total_students),
            "ACTIVE_CLASSES": str(teacher.active_classes),
        }

    def describe(self, teacher: Teacher) -> str:
        return f"({teacher.total_students} students)"
