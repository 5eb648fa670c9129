"""Resolve storage credentials from settings, arguments or the terminal."""

import getpass
from typing import Callable, Dict, Optional
from ..config import Settings
from ..core.exceptions import MissingCredentialsError
from ..schemas.credential import Credentials
from ..utils.logger import get_logger

logger = get_logger(__name__)

Prompt = Callable[[str, bool], str]


def terminal_prompt(question: str, hide: bool) -> str:
    """Ask on the terminal; hidden input for secrets."""
    print(question)
    if hide:
        return getpass.getpass("> ")
    return input("> ")


class CredentialService:
    """Service for collecting the credentials needed to reach the store."""

    # Envar name -> settings attribute
    REQUIRED = {
        "AWS_ACCESS_KEY_ID": "aws_access_key_id",
        "AWS_SECRET_ACCESS_KEY": "aws_secret_access_key",
        "AWS_DEFAULT_REGION": "aws_region",
    }

    def __init__(self, settings: Settings, prompt: Optional[Prompt] = None):
        self.settings = settings
        self.prompt = prompt or terminal_prompt

    def resolve(self, region: Optional[str] = None, no_prompt: bool = False) -> Credentials:
        """
        Build credentials, asking for any value that is still missing.
        Args:
            region: Region from the command line, overrides the envar
            no_prompt: Fail instead of prompting
        Raises:
            MissingCredentialsError: a value is missing and no_prompt is set
        """
        values: Dict[str, str] = {
            name: getattr(self.settings, attr) or "" for name, attr in self.REQUIRED.items()
        }
        if region:
            values["AWS_DEFAULT_REGION"] = region

        asked = False
        for name, value in values.items():
            if value:
                continue
            if no_prompt:
                raise MissingCredentialsError(name)

            if not asked:
                logger.info("Missing variables detected")
                asked = True
            hide = name != "AWS_DEFAULT_REGION"
            question = f'\nPlease provide a value for "{name}"'
            if hide:
                question += " (input will be hidden)"
            values[name] = self.prompt(question, hide).strip()
            if not values[name]:
                raise MissingCredentialsError(name)

        if asked:
            logger.info("Thank you. Continuing operation")

        return Credentials(
            access_key_id=values["AWS_ACCESS_KEY_ID"],
            secret_access_key=values["AWS_SECRET_ACCESS_KEY"],
            region=values["AWS_DEFAULT_REGION"],
            endpoint_url=self.settings.s3_endpoint_url,
        )
