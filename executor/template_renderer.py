from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, select_autoescape
from typing import Dict, Any
import logging

from models.post import Post
from models.recipient import Recipient
from models.site_settings import SiteSettings
from utils.errors import RenderError

logger = logging.getLogger("ghost_mailer")

DEFAULT_TEMPLATE = "newsletter.html.j2"


class EmailRenderer:
    def __init__(self, template_dir: str, ghost_base_url: str, template_name: str = DEFAULT_TEMPLATE):
        # StrictUndefined raises an error if a variable is missing
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            undefined=StrictUndefined,
            autoescape=select_autoescape(enabled_extensions=("html", "j2")),
        )
        self.ghost_base_url = ghost_base_url.rstrip("/")
        self.template_name = template_name

    def build_context(self, post: Post, settings: SiteSettings, recipient: Recipient) -> Dict[str, Any]:
        author = post.primary_author
        return {
            "site": {
                "url": settings.url,
                "title": settings.title,
                "description": settings.description,
                "color": settings.accent_color,
            },
            "post": {
                "id": post.id,
                "url": post.url,
                "title": post.title,
                "html": post.html,
                "excerpt": post.excerpt,
                "author": author.name,
                "author_image": author.profile_image,
                "author_bio": author.bio,
                "author_url": author.url,
                "feature_image": post.feature_image,
                "feature_image_alt": post.feature_image_alt,
                "feature_image_caption": post.feature_image_caption,
                "reading_time": post.reading_time,
            },
            "newsletter": {
                "subscription_link": f"{self.ghost_base_url}#/portal/account",
                "unsubscribe_link": f"{self.ghost_base_url}#/portal/account?action=unsubscribe&uuid={recipient.id}",
            },
        }

    def render(self, post: Post, settings: SiteSettings, recipient: Recipient) -> str:
        """Renders the newsletter HTML for one recipient."""
        try:
            template = self.env.get_template(self.template_name)
            return template.render(**self.build_context(post, settings, recipient))
        except TemplateError as e:
            logger.error(f"Error rendering email for {recipient.email}: {e}")
            raise RenderError(f"Template rendering failed: {e}")
