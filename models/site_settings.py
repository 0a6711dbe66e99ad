from pydantic import BaseModel, ConfigDict

DEFAULT_ACCENT_COLOR = "#ff247c"


class SiteSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    accent_color: str = DEFAULT_ACCENT_COLOR
    url: str
