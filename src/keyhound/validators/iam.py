"""AWS IAM identity probe.

The probe calls IAM ``GetUser`` without a user name, which returns the
identity the credentials belong to. How the call fails tells us how far the
credentials got:

- ``AccessDenied``: AWS authenticated the pair but the identity may not
  describe itself. The key is live.
- ``InvalidClientTokenId``: the access key identifier does not exist.
- ``SignatureDoesNotMatch``: the identifier exists but the secret is wrong.

Anything else proves nothing either way and is reported as inconclusive.
"""

from __future__ import annotations

import logging

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from keyhound.core.exceptions import ValidationInconclusive
from keyhound.core.logging import mask
from keyhound.core.models import ValidationOutcome
from keyhound.validators import BaseValidator

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-west-2"
DEFAULT_TIMEOUT = 15.0

ERROR_CODE_OUTCOMES: dict[str, ValidationOutcome] = {
    "AccessDenied": ValidationOutcome.AUTHENTICATED_NO_PERMISSION,
    "InvalidClientTokenId": ValidationOutcome.INVALID_IDENTIFIER,
    "SignatureDoesNotMatch": ValidationOutcome.MISMATCHED_SECRET,
}


def classify_error_code(code: str | None) -> ValidationOutcome:
    """Map an AWS error code to a validation outcome.

    Args:
        code: The ``Error.Code`` of a failed AWS response.

    Returns:
        The matching outcome, or ``INCONCLUSIVE`` for unknown codes.
    """
    if code is None:
        return ValidationOutcome.INCONCLUSIVE
    return ERROR_CODE_OUTCOMES.get(code, ValidationOutcome.INCONCLUSIVE)


class IamValidator(BaseValidator):
    """Validates credential pairs against the AWS IAM API using boto3.

    Each call builds its own boto3 session from the static pair (no session
    token, no STS exchange), so the validator is safe to use from several
    threads at once.

    Attributes:
        region: AWS region the IAM client is created in.
        endpoint_url: Optional endpoint override (e.g., a local emulator).
        timeout: Connect and read timeout in seconds for the probe.
    """

    def __init__(
        self,
        region: str = DEFAULT_REGION,
        endpoint_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.region = region
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self._client_config = Config(
            region_name=region,
            connect_timeout=timeout,
            read_timeout=timeout,
            retries={"total_max_attempts": 1},
        )

    @property
    def name(self) -> str:
        return "iam"

    def _create_client(self, identifier: str, secret: str) -> BaseClient:
        session = boto3.session.Session(
            aws_access_key_id=identifier,
            aws_secret_access_key=secret,
            region_name=self.region,
        )
        return session.client(
            "iam",
            config=self._client_config,
            endpoint_url=self.endpoint_url,
        )

    def probe(self, identifier: str, secret: str) -> ValidationOutcome:
        """Issue the identity request and classify its result.

        Raises:
            ValidationInconclusive: If the failure does not say anything
                about the credentials.
        """
        client = self._create_client(identifier, secret)
        try:
            client.get_user()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            outcome = classify_error_code(code)
            if outcome is ValidationOutcome.INCONCLUSIVE:
                raise ValidationInconclusive(
                    "Unclassified IAM error response", code=code
                ) from e
            return outcome
        except BotoCoreError as e:
            raise ValidationInconclusive(f"IAM request failed: {e}") from e
        return ValidationOutcome.CONFIRMED

    def validate(self, identifier: str, secret: str) -> ValidationOutcome:
        try:
            outcome = self.probe(identifier, secret)
        except ValidationInconclusive as e:
            logger.debug(f"Inconclusive probe for {mask(identifier)}: {e}")
            return ValidationOutcome.INCONCLUSIVE
        logger.debug(f"Probe for {mask(identifier)}: {outcome.value}")
        return outcome
