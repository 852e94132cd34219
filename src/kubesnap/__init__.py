# Kubesnap Namespace Initialization
__version__ = "0.3.0"

# Branding used for output directories, state folders and the summary artifact
APP_NAME = "kubesnap"
