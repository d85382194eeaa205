from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.branches.models import Branch
from modules.core.actors import SYSTEM_ACTOR
from modules.inventory.models import InventoryRecord
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.orders.services import build_order_service
from modules.retailers.models import Retailer

# Happy-path walk through the workflow; seeded orders stop at a random step.
_WORKFLOW = [
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.PICKED,
    OrderStatus.DISPATCHED,
    OrderStatus.COMPLETED,
]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=50)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        branches = self._seed_branches()
        retailers = self._seed_retailers()
        records_created = self._seed_inventory(branches)
        orders_created = self._seed_orders(branches, retailers, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"branches={len(branches)}, "
                f"retailers={len(retailers)}, "
                f"inventory_records={records_created}, "
                f"orders={orders_created}"
            )
        )

    def _seed_branches(self) -> list[Branch]:
        self.stdout.write("Creating branches...")
        branches: list[Branch] = []
        seed_branches = [
            ("BLR01", "Bangalore Central", "C001", "Southern Motors"),
            ("MYS01", "Mysore Road", "C001", "Southern Motors"),
            ("PUN01", "Pune Hadapsar", "C002", "Western Spares"),
        ]
        for code, name, company_id, company_name in seed_branches:
            branch, _ = Branch.objects.get_or_create(
                code=code,
                defaults={
                    "name": name,
                    "company_id": company_id,
                    "company_name": company_name,
                },
            )
            branches.append(branch)
        self.stdout.write(self.style.SUCCESS("Creating branches... Done!"))
        return branches

    def _seed_retailers(self) -> list[Retailer]:
        self.stdout.write("Creating retailers...")
        retailers: list[Retailer] = []
        seed_retailers = [
            ("Sri Ganesh Auto", "Ravi Kumar", "ravi@example.com", "9800000001"),
            ("Speedway Spares", "Anita Rao", "anita@example.com", "9800000002"),
            ("Highway Motors", "Suresh Patil", "suresh@example.com", "9800000003"),
            ("City Auto Parts", "Meena Iyer", "meena@example.com", "9800000004"),
            ("Express Garage", "Vikram Shah", "vikram@example.com", "9800000005"),
        ]
        for name, contact, email, mobile in seed_retailers:
            retailer, _ = Retailer.objects.get_or_create(
                email=email,
                defaults={"name": name, "contact_person": contact, "mobile": mobile},
            )
            retailers.append(retailer)
        self.stdout.write(self.style.SUCCESS("Creating retailers... Done!"))
        return retailers

    def _seed_inventory(self, branches: list[Branch]) -> int:
        self.stdout.write("Creating inventory records...")
        created_count = 0
        catalog = [
            ("BP-1001", "Brake Pad Set"),
            ("OF-2002", "Oil Filter"),
            ("AF-3003", "Air Filter"),
            ("SP-4004", "Spark Plug"),
            ("CL-5005", "Clutch Plate"),
            ("HL-6006", "Headlamp Assembly"),
            ("WB-7007", "Wiper Blade"),
            ("BT-8008", "Battery 12V"),
        ]
        for branch in branches:
            for index, (part_number, part_name) in enumerate(catalog):
                _, created = InventoryRecord.objects.get_or_create(
                    branch=branch,
                    part_number=part_number,
                    defaults={
                        "part_name": part_name,
                        "bucket_a": random.randint(0, 40),
                        "bucket_b": random.randint(0, 20),
                        "bucket_c": random.randint(0, 10),
                        "max_stock": random.choice([0, 50, 100, 150]),
                        "rack_location": f"R{index + 1:02d}-S{random.randint(1, 6)}",
                    },
                )
                created_count += int(created)
        self.stdout.write(self.style.SUCCESS("Creating inventory records... Done!"))
        return created_count

    def _seed_orders(
        self, branches: list[Branch], retailers: list[Retailer], count: int
    ) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (orders already exist)."))
            return 0

        service = build_order_service()
        parts = list(
            InventoryRecord.objects.order_by("part_number")
            .values_list("part_number", "part_name")
            .distinct()
        )
        for i in range(count):
            order = service.create_order(
                {
                    "retailer_id": random.choice(retailers).id,
                    "branch": random.choice(branches).code,
                    "urgent": random.random() < 0.2,
                    "remark": f"Seed order {i + 1}",
                    "items": [
                        {
                            "part_number": part_number,
                            "part_name": part_name,
                            "quantity": random.randint(1, 12),
                            "mrp": Decimal(random.randint(50, 5000)),
                            "basic_discount": Decimal(random.choice([0, 5, 10])),
                            "scheme_discount": Decimal(random.choice([0, 2, 3])),
                        }
                        for part_number, part_name in random.sample(
                            parts, k=random.randint(1, min(4, len(parts)))
                        )
                    ],
                },
                SYSTEM_ACTOR,
            )
            if random.random() < 0.15:
                service.cancel_order(order.id, SYSTEM_ACTOR, note="Seed cancellation")
                continue
            for target in _WORKFLOW[: random.randint(0, len(_WORKFLOW))]:
                service.transition(order.id, target, SYSTEM_ACTOR)

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
