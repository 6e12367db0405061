class PassportRetrievalError(Exception):
    pass


class ConfigurationError(PassportRetrievalError):
    def __init__(self , message):
        message = f"Configuration_error  = {message}"
        super().__init__(message)


class NotFoundError(PassportRetrievalError):
    def __init__(self , lookup_key):
        self.lookup_key = lookup_key
        message = f"Record {lookup_key} not found"
        super().__init__(message)


class RegistryUnavailableError(PassportRetrievalError):
    def __init__(self , lookup_key , cause):
        self.lookup_key = lookup_key
        self.cause = cause
        message = f"Registry call failed for {lookup_key}: {cause}"
        super().__init__(message)


class UnrecognizedStatusError(PassportRetrievalError):
    def __init__(self , status):
        self.status = status
        message = f"Unrecognized registry status {status!r}"
        super().__init__(message)


class FetchExhaustedError(PassportRetrievalError):
    def __init__(self, cid, attempts, last_error):
        self.cid = cid
        self.attempts = attempts
        self.last_error = last_error
        message = f"All {len(attempts)} mirrors failed for {cid}: {last_error}"
        super().__init__(message)


class DecryptionError(PassportRetrievalError):
    public_message = "Decryption failed"


class MalformedPayloadError(DecryptionError):
    def __init__(self , length):
        self.length = length
        message = f"Packed payload too short or corrupted ({length} bytes)"
        super().__init__(message)


class AuthenticationFailureError(DecryptionError):
    def __init__(self):
        super().__init__("Authentication tag mismatch (wrong key or tampered data)")


class EncodingFailureError(DecryptionError):
    def __init__(self , reason):
        self.reason = reason
        message = f"Decrypted data is not valid JSON text: {reason}"
        super().__init__(message)


class RetrievalFailedError(PassportRetrievalError):
    def __init__(self, stage, lookup_key, cause):
        self.stage = stage
        self.lookup_key = lookup_key
        self.cause = cause
        message = f"Retrieval of {lookup_key} failed at {stage}: {cause}"
        super().__init__(message)
