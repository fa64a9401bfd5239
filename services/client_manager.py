# services/client_manager.py

import logging
import os
from typing import Optional, Dict, Any

from google import genai


logger = logging.getLogger(__name__)


class ClientManager:
    """Centralized manager for external service clients"""

    def __init__(self, api_key: Optional[str] = None):
        self.clients = {}
        self._api_key = api_key
        self.logger = logger

    def initialize_all_clients(self) -> Dict[str, Any]:
        """Initialize all external service clients and return them as a dict"""

        clients = {}

        # Initialize Google GenAI (text + image completion)
        clients['google'] = self._initialize_google()

        self.clients = clients
        self.logger.info(f"Client initialization complete. Initialized: {list(clients)}")
        return clients

    def _initialize_google(self) -> genai.Client:
        """Initialize the Google GenAI client"""
        try:
            api_key = self._api_key or os.getenv('GOOGLE_API_KEY')
            if not api_key:
                raise ValueError("GOOGLE_API_KEY environment variable not set")

            client = genai.Client(api_key=api_key)

            self.logger.info("Google GenAI client initialized successfully")
            return client

        except Exception as e:
            self.logger.error(f"Failed to initialize Google GenAI client: {str(e)}")
            raise

    def get_client(self, service_name: str) -> Any:
        """Get a specific client by service name"""
        return self.clients.get(service_name)
