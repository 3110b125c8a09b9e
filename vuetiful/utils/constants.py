"""Centralized constants for vuetiful.

This module provides a single source of truth for file names, search
locations, limits and identifiers used across the package.
"""

# ============================================================================
# TARGET PACKAGE
# ============================================================================

PACKAGE_NAME = "vuetify"
NODE_MODULES = "node_modules"
PNPM_STORE = ".pnpm"
MANIFEST_FILE = "package.json"
PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"

# Possible stylesheet paths within the package, in priority order
ARTIFACT_CANDIDATES = (
    "dist/vuetify.css",
    "dist/vuetify.min.css",
    "lib/styles/main.css",
)

# Monorepo subdirectories to search
MONOREPO_SUBDIRECTORIES = (
    "frontend",
    "client",
    "web",
    "app",
    "ui",
    "packages",
    "apps",
)

# Subdirectories whose children are projects of their own
NESTED_PROJECT_DIRECTORIES = ("packages", "apps")

# ============================================================================
# LIMITS AND TIMING
# ============================================================================

MAX_ARTIFACT_SIZE_MB = 50
MAX_ARTIFACT_SIZE_BYTES = MAX_ARTIFACT_SIZE_MB * 1024 * 1024

FILE_WATCHER_DEBOUNCE_MS = 1000

# ============================================================================
# CACHE
# ============================================================================

CACHE_KEY_PREFIX = "vuetify-cache-"
STATE_DIR = ".vuetiful"
CACHE_SUBDIR = "cache"
LOG_SUBDIR = "logs"
CONFIG_FILE = "config.json"
ERROR_LOG_NAME = "error.log"

# ============================================================================
# UTILITY CLASS PREFIXES
# ============================================================================

UTILITY_PREFIXES = (
    "ma-", "mt-", "mr-", "mb-", "ml-", "ms-", "me-", "mx-", "my-",
    "pa-", "pt-", "pr-", "pb-", "pl-", "ps-", "pe-", "px-", "py-",
    "d-",
    "flex-", "align-", "justify-", "align-self-", "align-content-", "order-",
    "text-", "font-",
    "bg-",
    "elevation-",
    "rounded", "border-",
    "w-", "h-", "min-w-", "max-w-", "min-h-", "max-h-",
    "position-", "top-", "right-", "bottom-", "left-",
    "ga-", "gr-", "gc-",
    "overflow-",
    "float-",
    "opacity-",
)

# ============================================================================
# CONFIGURATION AND COMMANDS
# ============================================================================

CONFIG_SHOW_WARNINGS = "showWarnings"
CONFIG_ENABLE_LOGGING = "enableLogging"

COMMAND_REFRESH_UTILITIES = "vuetiful.refreshUtilities"

ENV_PREFIX = "VUETIFUL_"

DOCS_URL = "https://vuetifyjs.com/"
REINSTALL_COMMAND = ("npm", "install", "--force", "vuetify")
