from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Project Collaboration"
    API_V1_STR: str = "/api/v1"

    MONGODB_URL: str
    DATABASE_NAME: str = "project_collaboration"

    LOG_LEVEL: str = "INFO"

    # Invitation codes
    INVITATION_CODE_LENGTH: int = 8
    INVITATION_CODE_MAX_ATTEMPTS: int = 5

    # Optimistic concurrency for membership writes
    MEMBERSHIP_WRITE_MAX_RETRIES: int = 5

    # Frontend (join links encoded in project QR codes)
    FRONTEND_BASE_URL: str = "http://localhost:3000"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
