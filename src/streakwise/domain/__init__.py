"""Domain layer: collaborator interfaces the statistics engine depends on."""
