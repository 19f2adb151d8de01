# Obsidian MCP Server
#
# Exposes the Obsidian Local REST API plugin as MCP tools over stdio or HTTP(S).
#
# Modular package structure:
# - config.py: Environment settings and validate_config()
# - models.py: Configuration records and REST response models
# - errors.py: ConfigurationError, ObsidianAPIError and the startup failure exit
# - utils.py: Port parsing, vault path encoding, PATCH target normalisation
# - client.py: ObsidianClient, one coroutine per REST endpoint
# - connectivity.py: Startup probe against the status endpoint
# - tools.py: MCP tool declarations, dispatch and server factory
# - transports/: stdio and HTTP(S) transports and their factory
# - logging.py: structlog configuration
# - main.py: Process lifecycle and entry point

__version__ = "1.0.0"
