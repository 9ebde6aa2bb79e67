"""Command-line parsing, modes, directories and configuration."""