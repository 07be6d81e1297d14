"""Hosted platform config. Project URL and keys from settings (SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_ROLE_KEY)."""
from sad.config import settings


class SupabaseConfig:
    """Project URL and API keys for the hosted platform."""

    __slots__ = ("url", "anon_key", "service_role_key")

    def __init__(
        self,
        *,
        url: str | None = None,
        anon_key: str | None = None,
        service_role_key: str | None = None,
    ) -> None:
        self.url = (url or settings.supabase_url).strip().rstrip("/")
        self.anon_key = (anon_key or settings.supabase_anon_key).strip()
        self.service_role_key = (service_role_key or settings.supabase_service_role_key).strip()

    def is_configured(self) -> bool:
        return bool(self.url and self.service_role_key)

    def headers(self, *, service_role: bool = True) -> dict[str, str]:
        """Headers for the REST/auth/realtime gateways. service_role=False uses the anon key (RLS applies)."""
        key = self.service_role_key if service_role else self.anon_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }
