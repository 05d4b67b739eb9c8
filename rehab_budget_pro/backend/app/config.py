from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    database_url: str = "sqlite:///./rehab_budget_pro.db"
    auto_create_tables: bool = True

    # ---- Logging ----
    log_level: str = "INFO"
    log_json: bool = True  # false -> plain text lines for local terminals
    sql_log_level: str = "WARNING"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Routing (main.py mounts every router here) ----
    api_prefix: str = "/api"

    # ---- Reproducibility ----
    engine_version: str = "2026-10-17.v1"

    # ---- Project defaults (applied when a create payload omits them) ----
    default_state: str = "MN"
    default_contingency_percent: float = 10.0
    default_selling_cost_percent: float = 8.0
    default_hold_months: float = 4.0

    # ---- Calculation thresholds ----
    mao_arv_multiplier: float = 0.70  # 70% rule
    roi_threshold_good: float = 15.0
    roi_threshold_fair: float = 10.0
    variance_warning_percent: float = 5.0
    variance_critical_percent: float = 10.0

    # ---- Org context (headers; auth itself is handled upstream) ----
    dev_auto_provision: bool = True

    dev_header_org_slug: str = "X-Org-Slug"
    dev_header_user_email: str = "X-User-Email"
    dev_header_user_role: str = "X-User-Role"

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if is_prod:
            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")

        if not (0.0 < float(self.mao_arv_multiplier) <= 1.0):
            raise ValueError("mao_arv_multiplier must be in (0, 1]")
        if float(self.roi_threshold_good) < float(self.roi_threshold_fair):
            raise ValueError("roi_threshold_good must be >= roi_threshold_fair")
        if float(self.variance_critical_percent) < float(self.variance_warning_percent):
            raise ValueError("variance_critical_percent must be >= variance_warning_percent")


settings = Settings()
