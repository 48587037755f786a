"""
Usage Examples for retro-http
Demonstrates configuration, raw and typed calls, uploads and error handling
"""

from dataclasses import dataclass
from pathlib import Path

from retro_http import (
    Canceller,
    ClassifiedError,
    ConfigLoader,
    ConfigValidator,
    ErrorKind,
    HttpMethod,
    RetroClient,
    RetroFormData,
    TimeUnit,
)


# =============================================================================
# Example 1: Programmatic Configuration
# =============================================================================

def programmatic_client_example() -> RetroClient:
    """Configure a client with all options"""
    client = RetroClient(
        base_url="https://api.example.com",
        auth_token="Bearer your-token",
        timeout=15,
        time_unit=TimeUnit.SECONDS,
    )

    # Later updates only touch the values given
    client.init(timeout=30)

    return client


# =============================================================================
# Example 2: File and Environment Configuration
# =============================================================================

def file_client_example() -> RetroClient:
    """
    Load configuration from a JSON file, then environment variables

    export RETRO_BASE_URL="https://api.example.com"
    export RETRO_AUTH_TOKEN="Bearer your-token"
    export RETRO_TIMEOUT="30"
    """
    return RetroClient.from_config(
        file="./config/retro_config.json",
        env=True,
        timeout=60,  # Keyword overrides win over file and environment
    )


# =============================================================================
# Example 3: Raw Calls
# =============================================================================

def raw_call_example(client: RetroClient) -> None:
    """Call an endpoint and inspect the untyped result"""
    result = client.call(
        "/users",
        HttpMethod.GET,
        query_parameters={"page": 1, "search": None},
    )

    if result.is_successful:
        print(f"Users: {result.data}")
    else:
        print(f"Request rejected ({result.status_code}): {result.error}")


# =============================================================================
# Example 4: Typed Calls
# =============================================================================

@dataclass
class User:
    id: int
    name: str

    @classmethod
    def from_json(cls, data: dict) -> "User":
        return cls(id=data["id"], name=data["name"])


def typed_call_example(client: RetroClient) -> None:
    """Decode a successful payload into a model"""
    outcome = client.type_safe_call("/users/1", HttpMethod.GET, User.from_json)

    if outcome.is_successful:
        print(f"User: {outcome.data.name}")
    else:
        print(f"Lookup failed: {outcome.error}")


# =============================================================================
# Example 5: Multipart Upload with Progress and Cancellation
# =============================================================================

def upload_example(client: RetroClient, path: Path) -> None:
    """Upload a file alongside form fields"""
    canceller = Canceller()
    form = RetroFormData({"title": "Quarterly report", "file": path})

    def on_progress(sent: int, total: int) -> None:
        print(f"Uploaded {sent}/{total} bytes")

    result = client.form_data_call(
        "/documents",
        HttpMethod.POST,
        form,
        on_progress=on_progress,
        canceller=canceller,
    )
    print(f"Upload finished with status {result.status_code}")


# =============================================================================
# Example 6: Error Handling
# =============================================================================

def error_handling_example(client: RetroClient) -> None:
    """React to classified errors"""
    try:
        client.call("/reports/annual", HttpMethod.GET)
    except ClassifiedError as e:
        if e.kind == ErrorKind.TIMEOUT:
            print("Server is slow, try again later")
        elif e.kind == ErrorKind.AUTHORIZATION:
            print("Please sign in again")
        else:
            print(f"{e.kind.value}: {e.message}")


# =============================================================================
# Example 7 and 8: Configuration Validation and Templates
# =============================================================================

def validation_example() -> None:
    """Validate configuration before use"""
    result = ConfigValidator().validate({"base_url": "ftp://files", "timeout": -1})

    if not result.valid:
        print("Configuration validation failed:")
        for error in result.errors:
            print(f"  - {error.field}: {error.message}")


def create_config_template_example() -> None:
    """Create a template configuration file"""
    ConfigLoader().create_template("./config/retro_config.template.json")
    print("Configuration template created at ./config/retro_config.template.json")


# =============================================================================
# Run Examples
# =============================================================================

if __name__ == "__main__":
    print("=== retro-http Examples ===\n")

    print("7. Configuration Validation:")
    validation_example()
    print()

    print("8. Create Configuration Template:")
    create_config_template_example()
