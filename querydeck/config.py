APP_DIR_NAME = "querydeck"
CONFIG_FILE_NAME = "graphql.config.json"
CONFIG_DIR_ENV = "QUERYDECK_CONFIG_DIR"
CONFIG_POLL_INTERVAL = 2.0

REQUEST_TIMEOUT = 20.0
NOTIFICATION_TITLE = "GraphQL Query Error"
RESTART_NOTIFICATION_TITLE = "GraphQL Language Service"

DEFAULT_LANGUAGE_SERVICE_COMMAND = ("graphql-lsp", "server", "--method", "stream")
LANGUAGE_SERVICE_STOP_TIMEOUT = 5.0

GRAPHQL_LANGUAGE = "graphql"
GRAPHQL_EXTENSIONS = frozenset({".graphql", ".graphqls", ".gql"})

VARIABLES_PLACEHOLDER = "{ variables }"
SCRATCH_NAME = "scratch.graphql"
