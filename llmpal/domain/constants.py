# Endpoint and model defaults
OPEN_ROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "moonshotai/kimi-k2"
DEFAULT_PROMPT_COST = 0.60
DEFAULT_COMPLETION_COST = 2.50
DEFAULT_MAX_TOKENS = 16384

# Transport deadline (seconds)
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_RESPONSE_TIMEOUT = 600.0

# Credentials and identifying headers
API_KEY_ENV_VAR = "OPENROUTER_API_KEY"
HTTP_REFERER = "https://github.com/00dev-org/llmpal"
X_TITLE = "llmpal"

# Config files, searched in this order in the project dir, then the home dir
CONFIG_FILENAMES = (".llmpal.yml", ".llmpal.yaml", ".llmpal.json")

# Quarantine dumps
QUARANTINE_PREFIX = "dump_"
QUARANTINE_SUFFIX = ".log"
