"""Constants used throughout the Dock application."""


# Project configuration
CONFIG_FILE_NAME = ".dock"
DOCKERFILE_NAME = "Dockerfile"
COMPOSE_FILE_NAMES = [
    "docker-compose.yml",
    "docker-compose.yaml",
    "compose.yml",
    "compose.yaml",
]

# Container defaults
DEFAULT_WORKDIR = "/workspace"
DEFAULT_ATTACH_COMMAND = ["sh"]
DEFAULT_DETACH_KEYS = "ctrl-x,x"
DOCKER_SOCKET = "/var/run/docker.sock"
IMAGE_PREFIX = "dock"

# Environment variables injected into managed containers
INSIDE_DOCK_ENV = "INSIDE_DOCK"
WORKSPACE_DIR_ENV = "WORKSPACE_DIR"

# Docker's legal container name character set
CONTAINER_NAME_PATTERN = r"^[a-zA-Z0-9][a-zA-Z0-9_.-]*$"
CONTAINER_NAME_ILLEGAL_CHARS = r"[^a-zA-Z0-9_.-]"
NAME_SUBSTITUTE = "_"
ENV_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"

# Shared container (extend / terraform) conventions
SHARED_IMAGE_PREFIX = "dock-shared"
EXTENSION_PLACEHOLDER_COMMAND = ["sleep", "infinity"]
EXTENSION_TEMP_SUFFIX = ".extending-"
PROJECT_LABEL_PREFIX = "dock."
COMPOSE_LABEL_PREFIX = "compose."
PROJECTS_LABEL = "projects"
STARTUP_SERVICES_LABEL = "startup_services"

# Terraform workspace inside the shared container
TERRAFORM_WORKSPACE = "/tmp/dock-terraform"
COMPOSE_COMMAND = ["docker", "compose"]

# Answers accepted by confirmation prompts
AFFIRMATIVE_ANSWERS = ("y", "yes")
