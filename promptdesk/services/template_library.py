"""
TEMPLATE LIBRARY MODULE
=======================

Named, categorized prompt bodies the user can save and load back into the
prompt editor. Loading copies the content out; nothing links the prompt back
to the template. Templates are never edited, only created and deleted.

When there is no stored templates record (first run, or the record was
corrupt) the library starts with the built-in set below.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from config import DEFAULT_TEMPLATE_CATEGORY
from promptdesk.errors import InvalidInputError, NotFoundError
from promptdesk.models import Template
from promptdesk.utils.clock import utc_now

logger = logging.getLogger("PromptDesk")

TemplateListener = Callable[[List[Template]], None]


def _builtin(id: str, name: str, description: str, category: str, day: int, content: str) -> Template:
    return Template(
        id=id,
        name=name,
        description=description,
        content=content,
        category=category,
        created_at=datetime(2024, 1, day, tzinfo=timezone.utc),
    )


BUILTIN_TEMPLATES: List[Template] = [
    _builtin(
        "1", "Code Review", "Review and improve code quality", "Development", 1,
        "Please review the following code and provide feedback on:\n"
        "1. Code quality and best practices\n"
        "2. Potential bugs or issues\n"
        "3. Performance optimizations\n"
        "4. Security concerns\n\n"
        "Code:\n```\n// Your code here\n```",
    ),
    _builtin(
        "2", "Creative Story", "Generate creative stories and content", "Creative", 2,
        "Write a creative story about [topic] with the following elements:\n"
        "- Genre: [specify genre]\n"
        "- Main character: [describe character]\n"
        "- Setting: [describe setting]\n"
        "- Conflict: [describe conflict]\n\n"
        "Make it engaging and original.",
    ),
    _builtin(
        "3", "Data Analysis", "Analyze and interpret data", "Analytics", 3,
        "Please analyze the following data and provide insights:\n\n"
        "Data:\n[Paste your data here]\n\n"
        "Questions to address:\n"
        "1. What are the key trends?\n"
        "2. Are there any anomalies?\n"
        "3. What recommendations can you make?\n"
        "4. What additional analysis would be helpful?",
    ),
    _builtin(
        "4", "Email Draft", "Help draft professional emails", "Communication", 4,
        "Please help me draft a professional email with the following details:\n\n"
        "- Recipient: [name/role]\n"
        "- Purpose: [reason for email]\n"
        "- Tone: [formal/casual/friendly]\n"
        "- Key points to include:\n"
        "  - [point 1]\n  - [point 2]\n  - [point 3]\n\n"
        "Make it clear, concise, and professional.",
    ),
    _builtin(
        "5", "Learning Guide", "Help explain complex topics", "Education", 5,
        "Please explain [topic] in a way that's easy to understand:\n\n"
        "- Target audience: [beginner/intermediate/advanced]\n"
        "- Focus areas: [specific aspects to cover]\n"
        "- Include examples: [yes/no]\n"
        "- Provide practical applications\n\n"
        "Make it engaging and educational.",
    ),
    _builtin(
        "6", "Problem Solver", "Help solve complex problems step by step", "Problem Solving", 6,
        "I'm facing this problem: [describe your problem]\n\n"
        "Please help me solve it by:\n"
        "1. Breaking it down into smaller parts\n"
        "2. Analyzing each part systematically\n"
        "3. Providing step-by-step solutions\n"
        "4. Suggesting alternative approaches\n"
        "5. Explaining the reasoning behind each step",
    ),
    _builtin(
        "7", "Content Writer", "Help write various types of content", "Writing", 7,
        "Please help me write [type of content] about [topic]:\n\n"
        "Requirements:\n"
        "- Tone: [formal/casual/technical/friendly]\n"
        "- Length: [short/medium/long]\n"
        "- Target audience: [describe audience]\n"
        "- Key points to cover:\n"
        "  - [point 1]\n  - [point 2]\n  - [point 3]\n\n"
        "Make it engaging, informative, and well-structured.",
    ),
    _builtin(
        "8", "Research Assistant", "Help with research and information gathering", "Research", 8,
        "I need to research [topic] for [purpose]. Please help me by:\n\n"
        "1. Identifying key areas to explore\n"
        "2. Suggesting research questions\n"
        "3. Recommending reliable sources\n"
        "4. Providing an outline for research\n"
        "5. Highlighting potential challenges\n\n"
        "Focus on: [specific aspects if any]",
    ),
]


class TemplateLibrary:
    """Insertion-ordered collection of templates."""

    def __init__(self, templates: Optional[List[Template]] = None):
        if templates is None:
            templates = BUILTIN_TEMPLATES
        self._templates: List[Template] = list(templates)
        self._listeners: List[TemplateListener] = []

    def list(self) -> List[Template]:
        return list(self._templates)

    def get(self, template_id: str) -> Template:
        for template in self._templates:
            if template.id == template_id:
                return template
        raise NotFoundError(f"Template '{template_id}' not found")

    def save(
        self,
        name: Optional[str],
        description: Optional[str],
        content: Optional[str],
        category: Optional[str] = None,
    ) -> Template:
        """Create a template from the current prompt. Name and content are required."""
        if not name or not name.strip() or not content or not content.strip():
            raise InvalidInputError("Name and content are required")

        template = Template(
            id=str(uuid.uuid4()),
            name=name.strip(),
            description=(description or "").strip(),
            content=content,
            category=(category or "").strip() or DEFAULT_TEMPLATE_CATEGORY,
            created_at=utc_now(),
        )
        self._templates.append(template)
        logger.info("Saved template %s (%s)", template.id, template.name)
        self._publish()
        return template

    def delete(self, template_id: str) -> bool:
        """Remove a template. Deleting an unknown id is a no-op and returns False."""
        for index, template in enumerate(self._templates):
            if template.id == template_id:
                del self._templates[index]
                logger.info("Deleted template %s", template_id)
                self._publish()
                return True
        return False

    def load_into(self, template_id: str) -> str:
        """Return the template body so it can be copied into the prompt editor."""
        return self.get(template_id).content

    def subscribe(self, listener: TemplateListener) -> None:
        self._listeners.append(listener)

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self.list())
