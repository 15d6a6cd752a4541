from pydantic import BaseModel

UNKNOWN_USER = "Unknown user"
UNKNOWN_EMAIL = "Unknown email"


class CurrentUser(BaseModel):
    """The signed-in user, as forwarded by the authenticating proxy."""
    uid: str
    display_name: str | None = None
    email: str | None = None

    @property
    def name_or_unknown(self) -> str:
        return self.display_name or UNKNOWN_USER

    @property
    def email_or_unknown(self) -> str:
        return self.email or UNKNOWN_EMAIL

    @property
    def uploader_label(self) -> str:
        return self.display_name or self.email or UNKNOWN_USER
