"""
Retry utility for handling transient errors in chat-completion requests.
"""

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from aistudy.exceptions.provider import ProviderConnectionError, ProviderTimeoutError


def retry_on_transient_errors(max_attempts=2, max_wait=10):
    """
    Decorator to retry coroutines on transient errors.

    Retries on:
    - ProviderTimeoutError: When the request times out
    - ProviderConnectionError: When the connection fails

    API errors (non-2xx) and parse errors are never retried: the provider
    answered, and asking again would not change the answer.

    Args:
        max_attempts: Total number of attempts, including the first one
        max_wait: Upper bound in seconds for the back-off between attempts

    Returns:
        Decorated function with exponential backoff retry logic
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=max_wait),
        retry=retry_if_exception_type((ProviderTimeoutError, ProviderConnectionError)),
        reraise=True,
    )
