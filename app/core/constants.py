"""Core constants: event names, tutor defaults, and shared literal values."""

# Error channel event carrying FirestorePermissionError records
PERMISSION_ERROR_EVENT = "permission-error"

# Firestore security-rule path prefix for the default database
FIRESTORE_RULES_PATH_PREFIX = "/databases/(default)/documents"

DEFAULT_CHAT_TITLE = "New Chat"

DEFAULT_SYSTEM_PROMPT = (
    "You are Lyra, an AI tutor. Your goal is to help the student verbalize their "
    "problem and guide them towards the solution by providing hints, analogies, and "
    "questions instead of direct answers. You should never give the direct answer. "
    "Emulate the Socratic method. Be patient and encouraging. You can use Markdown "
    "for formatting."
)

DEFAULT_EXAMPLE_ANSWERS = (
    "Instead of solving it for you, can you tell me what you've tried so far?",
)

# Shown to the student when the tutor could not be reached
INFERENCE_FAILURE_REPLY = (
    "I seem to be having trouble connecting. Please try again in a moment."
)
