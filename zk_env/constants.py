"""Constants for the ZK Env package."""

import re

# Regular expression patterns
WIKILINK_ALL_RE = re.compile(r'\[\[([^|\]]+)(?:\|([^\]]+))?\]\]')
MARKDOWN_LINK_RE = re.compile(r'(?<!!)\[[^\]]*\]\(([^)\s]+)(?:\s+"[^"]*")?\)')
URL_SCHEME_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')
INLINE_TAG_RE = re.compile(r'(?:^|(?<=\s))#([^\s#]+)')
HEADING_RE = re.compile(r'^#\s+(.+)$', re.MULTILINE)

# File extensions
MARKDOWN_EXTENSIONS = [".md", ".markdown"]

# Query token prefixes, checked in this order
EXCLUDE_TAG_PREFIX = "!#"
INCLUDE_TAG_PREFIX = "#"
EXCLUDE_LINK_PREFIX = "!>"
INCLUDE_LINK_PREFIX = ">"
TAG_SEPARATOR = "/"

# Default configuration values
DEFAULT_CONFIG_PATH = "~/.config/zk_env/config.yaml"
DEFAULT_NOTES_DIR = "~/notes"
DEFAULT_INDEX_FILENAME = "index.json"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_FILTER_MODE = "any"
DEFAULT_STATS_LIMIT = 50
DEFAULT_EXCLUDE_PATTERNS = [".git", ".obsidian", "node_modules"]
FENCED_CODE_RE = re.compile(r'^[ \t]*(```|~~~).*?(?:^[ \t]*\1[^\n]*$|\Z)', re.MULTILINE | re.DOTALL)
INLINE_CODE_RE = re.compile(r'`[^`\n]*`')
