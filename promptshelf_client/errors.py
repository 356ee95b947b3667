from typing import Optional


class PromptStorageError(Exception):
    """
    Base exception for failures talking to the hosted prompt storage service
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def __str__(self):
        return f"{type(self).__name__}: {self.message}"


class APIConnectionError(PromptStorageError):
    """
    The request never produced an HTTP response (DNS, refused connection, timeout)
    """


class APIStatusError(PromptStorageError):
    """
    The service answered with a non-2xx status code
    """

    def __init__(self, status_code: int, message: str, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{status_code} {message}")


class PromptNotFoundError(APIStatusError):
    def __init__(self, prompt_id: str, body: Optional[str] = None):
        self.prompt_id = prompt_id
        super().__init__(404, f"Prompt {prompt_id} not found", body=body)
