# app/config.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", extra="allow")

    # Document validation (HMAC)
    hmac_secret: str = ""

    # MySQL
    mysql_host: str = "localhost"
    mysql_port: int = 3306
    mysql_user: str = "root"
    mysql_password: str = ""
    mysql_database: str = "permission_letters"

    # Full SQLAlchemy URL, overrides the MySQL parts when set
    database_url: Optional[str] = None

    # Base URL printed into QR codes; falls back to the request origin
    public_base_url: Optional[str] = None

    # Letterhead
    school_foundation: str = "YAYASAN PESAT BIRRUL WALIDAIN"
    school_name: str = "SMK INFORMATIKA PESAT"
    school_accreditation: str = "TERAKREDITASI A"
    school_address: str = "Jalan Poras No. 7 Sindang Barang Loji (0251) 8346223 Kota Bogor"
    school_contact: str = "Email : smkit.pesat@gmail.com   Website: www.smkpesat.sch.id"
    school_npsn: str = "20267664"
    school_city: str = "Bogor"

    # Account that can never be deleted through the users API
    dev_admin_email: str = "developer@system.local"

    # App Settings
    debug: bool = False
    log_level: str = "INFO"

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_database}"
        )

settings = Settings()
