import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

# Look for .env in the current working directory first, then package directory as fallback
ENV_FILE = Path.cwd() / '.env' if (Path.cwd() / '.env').exists() else Path(__file__).parent / '.env'

TRUE_VALUES = ('1', 'true', 'yes', 'on')


def load_env(file_path: Path = ENV_FILE):
    """Load environment variables from .env file if it exists, otherwise skip gracefully"""
    if file_path.exists():
        with file_path.open('r', encoding='utf-8') as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith('#') or '=' not in line:
                    continue
                name, value = line.split('=', 1)
                value = value.strip().strip('"').strip("'")
                os.environ[name.strip()] = value
    # If .env doesn't exist, environment variables can still be set externally


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in TRUE_VALUES


@dataclass
class Settings:
    skool_url: str = ''
    email: str = ''
    password: str = ''
    cookie_data: str = ''
    output_dir: str = 'downloads'
    wait_seconds: float = 5.0  # Pause after each navigation so the page can hydrate
    headless: bool = True
    debug: bool = False
    session_timeout: float = 1800.0  # Wall-clock budget for the whole browser session
    yt_dlp_path: str = 'yt-dlp'

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> 'Settings':
        load_env(env_file or ENV_FILE)

        return cls(
            skool_url=os.getenv('SKOOL_URL', ''),
            email=os.getenv('SKOOL_EMAIL', ''),
            password=os.getenv('SKOOL_PASSWORD', ''),
            cookie_data=os.getenv('COOKIE_DATA', ''),
            output_dir=os.getenv('OUTPUT_DIR', 'downloads'),
            wait_seconds=float(os.getenv('WAIT_SECONDS', '5')),
            headless=_env_flag('HEADLESS', 'true'),
            debug=_env_flag('DEBUG', 'false'),
            session_timeout=float(os.getenv('SESSION_TIMEOUT', '1800')),
            yt_dlp_path=os.getenv('YT_DLP_PATH', 'yt-dlp'),
        )

    @property
    def use_cookie_session(self) -> bool:
        """Cookie auth is used only when no login credentials are configured."""
        return bool(self.cookie_data) and not (self.email and self.password)

    def validate(self) -> None:
        if not self.skool_url:
            raise SystemExit('Classroom URL not set. Pass --url or set SKOOL_URL in .env.')
        if not (self.email and self.password) and not self.cookie_data:
            raise SystemExit('Login not configured. Set SKOOL_EMAIL/SKOOL_PASSWORD or COOKIE_DATA in .env.')
        if self.wait_seconds < 0 or self.session_timeout <= 0:
            raise SystemExit('WAIT_SECONDS must be >= 0 and SESSION_TIMEOUT must be > 0.')

        # Basic directory permissions check
        output = Path(self.output_dir).absolute()
        probe = output
        while not probe.exists() and probe != probe.parent:
            probe = probe.parent
        if not os.access(probe, os.W_OK):
            raise SystemExit(f'Output directory is not writable: {output}')
