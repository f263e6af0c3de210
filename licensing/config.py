from pydantic_settings import BaseSettings
from pydantic import Field
import os

class Settings(BaseSettings):
    # === DATABASE ===
    DATABASE_URL: str = Field(default=os.environ.get("DATABASE_URL", "sqlite:///./licensing.db"), description="SQLAlchemy database URL")

    # === JWT AUTH ===
    SECRET_KEY: str = Field(default=os.environ.get("SECRET_KEY", "change-me"), description="Secret key for JWT token signing")
    ALGORITHM: str = Field(default=os.environ.get("ALGORITHM", "HS256"), description="JWT algorithm")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60)), description="JWT token expiration time in minutes")

    # === EMAIL ===
    EMAIL_HOST: str = Field(default=os.environ.get("EMAIL_HOST", "localhost"), description="SMTP host")
    EMAIL_PORT: int = Field(default=int(os.environ.get("EMAIL_PORT", 587)), description="SMTP port")
    EMAIL_HOST_USER: str = Field(default=os.environ.get("EMAIL_HOST_USER", ""), description="SMTP username")
    EMAIL_HOST_PASSWORD: str = Field(default=os.environ.get("EMAIL_HOST_PASSWORD", ""), description="SMTP password")
    EMAIL_FROM: str = Field(default=os.environ.get("EMAIL_FROM", "noreply@pmc.gov.in"), description="Email sender address")

    # === SIGNATURE OTP ===
    SIGNATURE_OTP_LENGTH: int = Field(default=6, description="Digits in a signature OTP")
    SIGNATURE_OTP_EXPIRE_MINUTES: int = Field(default=10, description="Signature OTP validity in minutes")

    # === POSITION FEES (INR) ===
    FEE_ARCHITECT: int = Field(default=0, description="Registration fee for Architect")
    FEE_LICENCE_ENGINEER: int = Field(default=3000, description="Registration fee for Licence Engineer")
    FEE_STRUCTURAL_ENGINEER: int = Field(default=1500, description="Registration fee for Structural Engineer")
    FEE_SUPERVISOR1: int = Field(default=900, description="Registration fee for Supervisor 1")
    FEE_SUPERVISOR2: int = Field(default=900, description="Registration fee for Supervisor 2")

    # === PAYMENT GATEWAY ===
    PAYMENT_GATEWAY_VERIFY_URL: str = Field(default=os.environ.get("PAYMENT_GATEWAY_VERIFY_URL", ""), description="Gateway transaction verification endpoint")
    PAYMENT_GATEWAY_SECRET_KEY: str = Field(default=os.environ.get("PAYMENT_GATEWAY_SECRET_KEY", ""), description="Gateway secret key")
    PAYMENT_MOCK_MODE: bool = Field(default=os.environ.get("PAYMENT_MOCK_MODE", "True").lower() == "true", description="Accept every gateway reference without calling the gateway")

    # === STORAGE ===
    STORAGE_DIR: str = Field(default=os.environ.get("STORAGE_DIR", "static"), description="Root folder for uploads and generated PDFs")

    # === WORKFLOW ===
    AUTO_ASSIGN_ON_SUBMIT: bool = Field(default=True, description="Move submitted applications straight into the Junior Engineer queue")
    FRONTEND_URL: str = Field(default=os.environ.get("FRONTEND_URL", "http://localhost:3000"), description="Portal URL used in emails")

    # === DEBUG MODE ===
    DEBUG: bool = Field(default=os.environ.get("DEBUG", "True").lower() == "true", description="Debug mode")

    class Config:
        env_file = ".env"
        case_sensitive = False

# Create settings instance
settings = Settings()
