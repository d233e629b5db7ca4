from src.models.product_variant import ProductVariant


class AvailabilityChecker:
    def is_stock_available(self, variant: ProductVariant) -> bool:
        if not variant.tracked:
            return True
        return (variant.on_hand or 0) - (variant.on_hold or 0) > 0
