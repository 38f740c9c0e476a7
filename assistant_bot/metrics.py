from prometheus_client import Counter, Histogram

# Inbound updates by decoded kind (message, callback, unknown).
UPDATES_TOTAL = Counter(
    "telegram_updates_total",
    "Total number of Telegram updates processed",
    ["type"],
)

# Command usage counts by command name.
COMMAND_TOTAL = Counter(
    "telegram_commands_total",
    "Total number of Telegram commands processed",
    ["command"],
)

# Completion call latency in seconds, per model.
COMPLETION_LATENCY = Histogram(
    "completion_latency_seconds",
    "Time spent waiting for the completion API",
    ["model"],
)

# Completion failures by classified kind.
COMPLETION_ERRORS = Counter(
    "completion_errors_total",
    "Total number of completion API errors",
    ["type"],
)

MODEL_SELECTIONS = Counter(
    "model_selections_total",
    "Total number of model selections made through the inline keyboard",
    ["model"],
)
