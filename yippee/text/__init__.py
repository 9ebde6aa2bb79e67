"""Terminal colours, formatting, messages and the logger with prompts."""