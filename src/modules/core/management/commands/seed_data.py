from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.core.exceptions import DomainError
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.views import build_order_service
from modules.products.models import Product
from modules.users.models import User


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=30)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users = self._seed_users()
        products = self._seed_products()
        orders_created = self._seed_orders(users, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={len(users)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> list[User]:
        self.stdout.write("Creating users...")
        users: list[User] = []
        seed_users = [
            ("Ana", "Souza", "+15550100001", "ana@example.com", "12 Elm St"),
            ("Bruno", "Lima", "+15550100002", "bruno@example.com", "4 Oak Ave"),
            ("Carla", "Mendes", "+15550100003", "", "77 Pine Rd"),
            ("Daniel", "Costa", "+15550100004", "daniel@example.com", "9 Birch Ln"),
            ("Helena", "Ferreira", "+15550100005", "", "31 Cedar Ct"),
            ("Julia", "Oliveira", "+15550100006", "julia@example.com", "5 Maple Dr"),
        ]
        for first_name, last_name, phone, email, address in seed_users:
            user, _ = User.objects.get_or_create(
                phone=phone,
                defaults={
                    "first_name": first_name,
                    "last_name": last_name,
                    "email": email,
                    "address": address,
                },
            )
            users.append(user)
        self.stdout.write(self.style.SUCCESS("Creating users... Done!"))
        return users

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ("Monitor 27\"", Decimal("1299.90")),
            ("Mechanical Keyboard", Decimal("399.90")),
            ("Gaming Mouse", Decimal("249.90")),
            ("Notebook 14\"", Decimal("3999.00")),
            ("Headset", Decimal("299.90")),
            ("Office Desk", Decimal("899.00")),
            ("Ergonomic Chair", Decimal("1499.00")),
            ("A4 Paper", Decimal("29.90")),
            ("Blue Pen", Decimal("4.90")),
            ("Notebook Stand", Decimal("149.90")),
        ]
        for name, price in catalog:
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={"price": price, "stock_count": random.randint(5, 200)},
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, users: list[User], products: list[Product], count: int) -> int:
        """Place orders through ``OrderService`` so stock stays consistent."""
        self.stdout.write("Creating orders...")
        if not users or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no users/products)."))
            return 0

        service = build_order_service()
        follow_ups = [
            (OrderStatus.IN_PROGRESS, None),
            (OrderStatus.COMPLETE, None),
            (OrderStatus.CANCELLED, "Customer changed their mind"),
            (OrderStatus.RETURNED, "Damaged on arrival"),
        ]

        orders_created = 0
        for _ in range(count):
            lines = random.sample(products, k=random.randint(1, 3))
            dto = CreateOrderDTO(
                user_id=random.choice(users).id,
                items=[
                    CreateOrderItemDTO(product_id=product.id, quantity=random.randint(1, 3))
                    for product in lines
                ],
            )
            try:
                order = service.create_order(dto)
            except DomainError as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order: {exc}"))
                continue
            orders_created += 1

            if random.random() < 0.6:
                status, reason = random.choice(follow_ups)
                service.update_status(order.order_id, status, reason)

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
