"""Building, running and recording external commands."""