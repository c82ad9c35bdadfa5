"""Client use cases"""
from .manage_clients import CreateClient, GetClient, ListClients, UpdateClient, DeleteClient
from .dtos import CreateClientInput, UpdateClientInput, ClientResponseDTO, ListClientsResponseDTO

__all__ = [
    "CreateClient",
    "GetClient",
    "ListClients",
    "UpdateClient",
    "DeleteClient",
    "CreateClientInput",
    "UpdateClientInput",
    "ClientResponseDTO",
    "ListClientsResponseDTO",
]
