from locust import HttpUser, task, between
import random

MENU = [
    {"id": 1, "name": "Pizza", "price": 150},
    {"id": 2, "name": "Biryani", "price": 220},
    {"id": 3, "name": "Masala Dosa", "price": 90},
    {"id": 4, "name": "Lassi", "price": 60},
]


class ApiUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Log in (and implicitly register) a user for this simulated client
        self.username = f"user_{random.randint(1, 1_000_000)}"
        self.client.post("/api/login", json={"username": self.username, "password": "load"})

    @task(3)
    def place_order(self):
        items = [dict(dish, quantity=random.randint(1, 3)) for dish in random.sample(MENU, k=random.randint(1, 3))]
        total = sum(item["price"] * item["quantity"] for item in items)
        self.client.post("/api/order", json={"username": self.username, "items": items, "total": total})

    @task(1)
    def list_orders(self):
        self.client.get(f"/api/orders/{self.username}", name="/api/orders/[username]")

    @task(1)
    def cart_history(self):
        self.client.get(f"/api/cart-history/{self.username}", name="/api/cart-history/[username]")
