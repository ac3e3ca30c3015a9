"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "create", "read", "read-details", "transfer", "delete", "range", "by-hash",
    "hash", "details-hash", "history", "connect", "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#2E86AB bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;46;134;171m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
  ___    _ _         ___          _    _
 | __|__| (_)___    | _ \\___ __ _(_)__| |_ _ _ _  _
 | _/ _ \\ | / _ \\   |   / -_) _` | (_-<  _| '_| || |
 |_|\\___/_|_\\___/   |_|_\\___\\__, |_/__/\\__|_|  \\_, |
                            |___/              |__/
{RESET}"""

WELCOME_TITLE = "Folio Registry CLI - Shared files with restricted details"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "folio> "

HELP_TEXT = """Available commands:
  create <name> <hash> <timestamp> <owner> <folio>   Register a file (sent via transient map)
  read <name>                                        Show the shared record of a file
  read-details <name>                                Show the restricted details of a file
  transfer <name> <owner>                            Change the owner of a file
  delete <name>                                      Delete a file, its details and index entry
  range <start-key> <end-key>                        Range query over the shared partition ("" = open)
  by-hash <hash>                                     List file names indexed under a content hash
  hash <name>                                        SHA-256 digest of the shared record
  details-hash <name>                                SHA-256 digest of the restricted details
  history [limit]                                    Show recent call records
  connect <host> <port>                              Point the CLI at another registry
  clear                                              Clear screen and redisplay welcome message
  help                                               Show this help
  exit                                               Exit REPL

Examples:
  create report.pdf QmXoypiz 1700000000 orgA 7
  read report.pdf
  transfer report.pdf orgB
  by-hash QmXoypiz
  delete report.pdf"""
