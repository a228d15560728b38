"""aliaskit - shell alias and completion proxy generator.

Builds typed alias and completion declarations (source-on-demand aliases for
script trees, aliases which inherit the completion of the command they wrap)
and renders them as bash code to be evaluated by the interactive shell.
"""
