class StorageError(Exception):
    """
    Exception raised when the browser profile storage cannot be read or written
    """

    def __init__(self, message: str, key: str = ""):
        self.message = message
        self.key = key
        super().__init__(self.message)

    def __str__(self):
        if self.key:
            return f"StorageError[{self.key}]: {self.message}"
        return f"StorageError: {self.message}"
