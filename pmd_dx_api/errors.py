from pmd_dx_api.params import SearchKey

# The only body a client ever sees for a failure on our side
INTERNAL_ERROR_MESSAGE = "Something went wrong on our side. Please contact the administrator."


class ResourceNotFoundError(Exception):
    """A by-ID or by-name lookup matched no parent row."""

    def __init__(self, resource_type: str, search_key: SearchKey):
        self.resource_type = resource_type
        self.search_key = search_key
        super().__init__(
            f"resource of type '{resource_type}' with {search_key.search_type} "
            f"'{search_key.value}' not found"
        )


class QueryError(Exception):
    """A database operation failed. The label names the logical query."""

    def __init__(self, label: str, cause: Exception):
        self.label = label
        self.cause = cause
        super().__init__(f"query '{label}' failed: {cause}")


class ConfigError(Exception):
    """A required environment variable is missing."""

    def __init__(self, missing_var: str):
        self.missing_var = missing_var
        super().__init__(f"missing environment variable '{missing_var}'")
