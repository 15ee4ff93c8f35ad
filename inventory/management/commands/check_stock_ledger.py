from django.core.management.base import BaseCommand, CommandError
from inventory.selectors import ledger_discrepancies


class Command(BaseCommand):
    help = "Compare each product's stock counter with the sum of its stock ledger movements."

    def add_arguments(self, parser):
        parser.add_argument("--product-id", type=int, help="Check a single product only")
        parser.add_argument("--show-all", action="store_true", help="List products that are in sync too")

    def handle(self, *args, **options):
        rows = ledger_discrepancies(product_id=options.get("product_id"), include_all=options.get("show_all", False))
        mismatches = 0
        for row in rows:
            if row["difference"]:
                mismatches += 1
                self.stdout.write(
                    self.style.WARNING(
                        f"{row['sku']} (id={row['product_id']}): stock={row['stock']} "
                        f"ledger={row['ledger']} difference={row['difference']:+d}"
                    )
                )
            else:
                self.stdout.write(f"{row['sku']} (id={row['product_id']}): stock={row['stock']} in sync")
        if mismatches:
            raise CommandError(f"{mismatches} product(s) out of sync with the stock ledger.")
        self.stdout.write(self.style.SUCCESS("Stock ledger is consistent."))
