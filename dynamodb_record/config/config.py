import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file if it exists
load_dotenv()

ENVIRONMENTS = ('dev', 'test', 'staging', 'prod')


class DynamoDBConfig(BaseModel):
    """Settings for the boto3 client behind DynamoDBStoreClient.

    Every field falls back to an environment variable, so
    ``DynamoDBConfig()`` and ``DynamoDBConfig.from_env()`` are equivalent.
    Point ``endpoint_url`` at DynamoDB Local or moto server for local runs.
    """

    # Session credentials; None lets boto3 use its own credential chain
    aws_access_key_id: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_ACCESS_KEY_ID"),
        description="AWS access key ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SECRET_ACCESS_KEY"),
        description="AWS secret access key"
    )

    region_name: str = Field(
        default_factory=lambda: os.getenv("AWS_REGION", "us-east-1"),
        description="AWS region name"
    )

    endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_ENDPOINT_URL"),
        description="Endpoint override, e.g. http://localhost:8000 for DynamoDB Local"
    )

    # Physical table naming
    table_prefix: str = Field(
        default_factory=lambda: os.getenv("DYNAMODB_TABLE_PREFIX", ""),
        description="Prefix put in front of every record table name"
    )

    environment: str = Field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "dev"),
        description="Deployment environment; every value but prod is part of the table name"
    )

    # botocore client settings
    max_pool_connections: int = Field(
        default=50,
        ge=1,
        description="botocore connection pool size"
    )

    retries: int = Field(
        default=3,
        ge=0,
        description="max_attempts handed to botocore; records never retry on their own"
    )

    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="botocore connect and read timeout in seconds"
    )

    enable_debug_logging: bool = Field(
        default_factory=lambda: os.getenv("DYNAMODB_DEBUG_LOGGING", "false").lower() == "true",
        description="Set the dynamodb_record loggers to DEBUG"
    )

    @field_validator('region_name')
    @classmethod
    def validate_region(cls, v):
        if not v:
            raise ValueError("AWS region name is required")
        return v

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        if v not in ENVIRONMENTS:
            raise ValueError(f"Environment must be one of: {list(ENVIRONMENTS)}")
        return v

    def physical_table_name(self, table_name: str) -> str:
        """Map a record's table name to the DynamoDB table it lives in.

        Args:
            table_name: Table name declared on the record class

        Returns:
            ``<prefix>_<environment>_<table_name>``, leaving out an empty
            prefix and the environment in prod
        """
        parts = [self.table_prefix] if self.table_prefix else []
        if self.environment != "prod":
            parts.append(self.environment)
        parts.append(table_name)
        return "_".join(parts)

    @classmethod
    def from_env(cls) -> 'DynamoDBConfig':
        """Create configuration from environment variables."""
        return cls()

    model_config = ConfigDict(
        validate_assignment=True
    )
