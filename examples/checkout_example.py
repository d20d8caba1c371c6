"""
Checkout Example — cart, coupon, address, stock check and one order.

Run: python examples/checkout_example.py
"""

from kungfu import Ok, Error

from cartflow import cart as K
from cartflow import coupon as CP
from cartflow import address as A
from cartflow import order as O
from cartflow import StockShortfallError
from examples._infra import banner, demo_client, run


async def main() -> None:
    banner("Checkout")

    async with demo_client() as client:
        storage = K.MemoryStorage()
        cart = K.CartStore(storage)
        selection = K.AddressSelectionStore(storage)
        coupons = CP.CouponResolver(client, cart)
        composer = O.OrderComposer(client, cart, selection, coupons)

        # 1. Fill the cart
        print("\n1. Cart:")
        cart.add(1, unit_price=85_000, quantity=2, name="Ca phe sua")
        cart.add(2, unit_price=45_000, quantity=5, name="Banh mi")
        for line in cart.lines():
            print(f"   {line.name} x{line.quantity} = {line.line_total}")

        # 2. Prefill from the profile, pick the saved address
        print("\n2. Address:")
        contact = (await A.load_contact(client)).value
        match await A.load_addresses(client):
            case Ok(records):
                selection.select(records[0])
                print(f"   selected: {records[0].canonical}")
            case Error(e):
                print(f"   could not load addresses: {e.message}")

        # 3. Coupon
        print("\n3. Coupon:")
        match await coupons.apply("WELCOME10", cart.subtotal()):
            case Ok(applied):
                print(f"   {applied.code}: {applied.discount_percentage}% off")
            case Error(e):
                print(f"   {e.message}")
        print(f"   quote: {composer.quote()}")

        # 4. Too many Banh mi: only 3 in stock
        print("\n4. Submit (over stock):")
        match await composer.submit(None, contact, O.PaymentMethod.COD):
            case Error(StockShortfallError(shortfalls=shortfalls)):
                for s in shortfalls:
                    print(f"   {s}")
            case other:
                print(f"   unexpected: {other}")

        # 5. Fix quantity, submit again
        print("\n5. Submit (fixed):")
        cart.set_quantity(2, 3)
        match await composer.submit(None, contact, O.PaymentMethod.VNPAY, note="call on arrival"):
            case Ok(confirmation):
                request = confirmation.request
                print(f"   order #{confirmation.order_id}: total={request.total_price}")
                print(f"   transaction={request.transaction_id}")
            case Error(e):
                print(f"   failed: {e}")

        print(f"\nCart empty after order: {cart.is_empty}")


if __name__ == "__main__":
    run(main)
