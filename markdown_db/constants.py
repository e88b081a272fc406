"""Constants for the markdown-db index."""

# Bump whenever the shape of stored records changes; a mismatch wipes the index
SCHEMA_VERSION = 4

# File extensions
MARKDOWN_EXTENSIONS = {".md", ".markdown"}

# Index storage
DEFAULT_DATA_DIRECTORY = "~/.cache/markdown-db"
DATABASE_FILENAME = "index.sqlite"
IN_MEMORY_DATABASE = ":memory:"

# Indexing
DEFAULT_MAX_PARALLEL_READS = 16

# Search limits
MAX_QUERY_LENGTH = 500

# Error messages - Actionable and specific
ERROR_MESSAGES = {
    "vault_path_missing": (
        "Vault path not provided. "
        "To fix: 1) Set the MARKDOWN_DB_VAULT_PATH environment variable, "
        "2) Or pass vault_root when building the configuration"
    ),
    "vault_not_found": (
        "Vault path does not exist: '{path}'. "
        "To fix: Check the path for typos and make sure the folder is mounted"
    ),
    "vault_not_directory": (
        "Vault path is not a directory: '{path}'. "
        "Point MARKDOWN_DB_VAULT_PATH at the folder that contains your notes"
    ),
    "data_dir_unavailable": (
        "Cannot create index directory '{path}': {error}. "
        "To fix: 1) Ensure the parent directory is writable, "
        "2) Set MARKDOWN_DB_DATA_DIR to a writable location, "
        "3) Or set MARKDOWN_DB_IN_MEMORY=true to skip persistence"
    ),
    "database_unavailable": (
        "Cannot open index database '{path}': {error}. "
        "To fix: 1) Check file permissions on the index directory, "
        "2) Make sure no other program holds an exclusive lock on the file"
    ),
    "database_corrupt": (
        "Index database '{path}' is unreadable: {error}. "
        "The index is a rebuildable cache and will be recreated from the vault"
    ),
    "record_corrupt": (
        "Stored {record} could not be decoded: {error}. "
        "The index will be rebuilt from the vault"
    ),
    "empty_search_query": (
        "Search query cannot be empty. "
        "Valid queries: 1) Keywords: 'machine learning', "
        "2) Tags: '#project', 3) Combined: '#urgent meeting notes'"
    ),
    "query_too_long": (
        "Search query too long: {length} characters (max: {max_length}). "
        "Shorten the text or search by tag instead"
    ),
    "invalid_tags": (
        "Invalid tags provided. "
        "Tags must be non-empty strings without whitespace. "
        "Example: ['project', 'urgent', 'area/work'] not ['', ' ', 'two words']"
    ),
    "invalid_tag_mode": (
        "Invalid tag_mode: '{mode}'. "
        "Must be either 'any' (at least one tag) or 'all' (every tag)"
    ),
    "invalid_limit": (
        "Invalid limit: {limit}. "
        "Must be a positive number, or omitted for no limit"
    ),
}
