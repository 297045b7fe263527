"""SSM client for persisting the root CA in AWS Parameter Store."""

import boto3
from botocore.exceptions import ClientError
from mypy_boto3_ssm import SSMClient as SSMClientType

from .authority_store import AuthorityStore
from .cert_utils import keystore_pem_to_authority
from .config import CAConfig
from .errors import CAError
from .logging_config import LOGGER
from .models import RootCertificateAuthority


class SSMClient:
    """SSM client for reading and writing the root CA keystore."""

    def __init__(self, region: str = "eu-west-2") -> None:
        """Initialize SSM client.

        Args:
            region: AWS region for SSM client
        """
        self.client: SSMClientType = boto3.client("ssm", region_name=region)

    @staticmethod
    def root_ca_path(project_name: str, account: str) -> str:
        return f"/{project_name}/{account}/ca/root/keystore"

    def get_root_ca_keystore(self, project_name: str, account: str) -> bytes | None:
        """Fetch root CA keystore PEM (certificate + private key) from SSM.

        Args:
            project_name: Project name prefix (e.g., 'intercept-proxy')
            account: Account/environment name (e.g., 'sandbox')

        Returns:
            Keystore PEM bytes, or None if the parameter does not exist
        """
        path = self.root_ca_path(project_name, account)
        try:
            response = self.client.get_parameter(Name=path, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ParameterNotFound":
                return None
            raise

        return response["Parameter"]["Value"].encode("utf-8")

    def put_root_ca_keystore(self, project_name: str, account: str, keystore_pem: bytes) -> None:
        """Write root CA keystore PEM to SSM as a single SecureString.

        Certificate and key share one parameter so a reader never sees a key
        from one root CA next to the certificate of another.
        """
        self.client.put_parameter(
            Name=self.root_ca_path(project_name, account),
            Value=keystore_pem.decode("utf-8"),
            Type="SecureString",
            Overwrite=True,
        )


class SSMAuthorityStore(AuthorityStore):
    """Root CA store backed by SSM Parameter Store."""

    def __init__(
        self,
        project_name: str,
        account: str,
        ssm_client: SSMClient | None = None,
        config: CAConfig | None = None,
    ) -> None:
        super().__init__(config)
        self.project_name = project_name
        self.account = account
        self.ssm_client = ssm_client or SSMClient()

    def _load(self) -> RootCertificateAuthority | None:
        try:
            keystore_pem = self.ssm_client.get_root_ca_keystore(self.project_name, self.account)
        except ClientError as e:
            raise CAError(
                f"failed to read root CA from SSM for {self.project_name}/{self.account}: {e}"
            ) from e
        if keystore_pem is None:
            LOGGER.info("No root CA in SSM for %s/%s", self.project_name, self.account)
            return None
        return keystore_pem_to_authority(keystore_pem)

    def _save(self, authority: RootCertificateAuthority) -> None:
        self.ssm_client.put_root_ca_keystore(
            self.project_name, self.account, authority.keystore_pem
        )
        LOGGER.info("Stored root CA in SSM for %s/%s", self.project_name, self.account)
