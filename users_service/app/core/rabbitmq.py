import json
import logging
import time
from typing import Dict, Any
import pika
import pika.exceptions

from .config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class RabbitMQPublisher:
    """RabbitMQ publisher for user events"""

    def __init__(self, host: str = None, port: int = None, user: str = None, password: str = None,
                 enabled: bool = None):
        self.host = host or settings.rabbitmq_host
        self.port = port or settings.rabbitmq_port
        self.user = user or settings.rabbitmq_user
        self.password = password or settings.rabbitmq_password
        self.enabled = settings.rabbitmq_enabled if enabled is None else enabled
        self.connection = None
        self.channel = None
        self.exchange = "user_exchange"
        self.routing_keys = {
            "user_created": "user.created",
        }

    def connect(self, max_retries: int = 5, retry_delay: int = 5) -> bool:
        """Establish connection to RabbitMQ with retries"""
        if not self.enabled:
            logger.info("RabbitMQ publishing disabled")
            return False

        for attempt in range(max_retries):
            try:
                credentials = pika.PlainCredentials(self.user, self.password)
                parameters = pika.ConnectionParameters(
                    host=self.host,
                    port=self.port,
                    credentials=credentials,
                    heartbeat=600,
                    blocked_connection_timeout=300,
                )

                self.connection = pika.BlockingConnection(parameters)
                self.channel = self.connection.channel()

                self.channel.exchange_declare(
                    exchange=self.exchange,
                    exchange_type='topic',
                    durable=True
                )

                logger.info(f"Connected to RabbitMQ at {self.host}:{self.port}")
                return True

            except pika.exceptions.AMQPConnectionError as e:
                logger.warning(f"RabbitMQ connection attempt {attempt + 1}/{max_retries} failed: {e}")
                if attempt < max_retries - 1:
                    time.sleep(retry_delay)
                else:
                    logger.error("Failed to connect to RabbitMQ after all retries")
            except Exception as e:
                # Channel errors such as an exchange redeclared with another type
                logger.error(f"Unexpected error connecting to RabbitMQ: {e}")
                self.channel = None
                return False

        self.channel = None
        return False

    def publish_event(self, event_type: str, data: Dict[str, Any]) -> bool:
        """Publish event to RabbitMQ"""
        if not self.enabled:
            return False

        message = {
            'event_type': event_type,
            'data': data
        }

        try:
            if not self.connection or self.connection.is_closed or not self.channel or self.channel.is_closed:
                if not self.connect(max_retries=1):
                    logger.warning(f"Failed to publish {event_type} event - no connection")
                    return False

            self.channel.basic_publish(
                exchange=self.exchange,
                routing_key=self.routing_keys.get(event_type, event_type.replace("_", ".")),
                body=json.dumps(message),
                properties=pika.BasicProperties(
                    delivery_mode=2,  # Persistent
                    content_type='application/json'
                )
            )
        except Exception as e:
            logger.error(f"Error publishing {event_type} event: {e}")
            return False

        logger.info(f"Published {event_type} event to RabbitMQ")
        return True

    def close(self):
        """Close connection"""
        try:
            if self.connection and not self.connection.is_closed:
                self.connection.close()
                logger.info("RabbitMQ connection closed")
        except pika.exceptions.AMQPError as e:
            logger.error(f"Error closing connection: {e}")


# Global publisher instance
rabbitmq_publisher = RabbitMQPublisher()


def get_publisher() -> RabbitMQPublisher:
    return rabbitmq_publisher
