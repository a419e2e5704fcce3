"""Template rendering for match emails using Jinja2.

Templates live in the talentmatch.notifications.email_templates package
directory. A missing context key raises NotificationTemplateError.
"""

import logging
from typing import Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders the subject, HTML body and text body of a match email."""

    def __init__(
        self,
        template_dir: str = "email_templates",
        subject_template: str = "match_alert_subject.j2",
        html_template: str = "match_alert_body.html.j2",
        text_template: str = "match_alert_body.txt.j2",
    ):
        self.subject_template_name = subject_template
        self.html_template_name = html_template
        self.text_template_name = text_template

        self.env = Environment(
            loader=PackageLoader("talentmatch.notifications", template_dir),
            autoescape=True,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Plain text must not be HTML-escaped
        self.text_env = self.env.overlay(autoescape=False)

    def render(self, context: Dict) -> Dict[str, str]:
        """Render all email templates with the provided context.

        Returns:
            Dictionary with ``subject`` (single line), ``html_body`` and ``text_body``

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        try:
            subject = self.text_env.get_template(self.subject_template_name).render(context)
            subject = " ".join(subject.split())
            html_body = self.env.get_template(self.html_template_name).render(context)
            text_body = self.text_env.get_template(self.text_template_name).render(context)
        except TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e

        return {"subject": subject, "html_body": html_body, "text_body": text_body}
