# Infrastructure clients
from clients.vault_client import VaultClient, get_valkey_url, get_booking_service_config
from clients.valkey_client import ValkeyClient
from clients.booking_client import BookingClient, BookingServiceError, SubmitResult
