"""Showcase examples for pilluml README."""

import logging

from pilluml import create_diagram


def hero_example():
    """Hero example: a class hierarchy with members and every connector kind."""
    create_diagram("""
@start_style
.class {
    --shadow-dx: 2;
    --shadow-dy: 2;
    --shadow-blur: 3;
}
@end_style

@start_uml
abstract class Shape {
+ {static} count: int
# {abstract} area(): double
}
interface Drawable {
+ draw(canvas: Canvas): void
}
class Circle {
- radius: double
+ area(): double
}
class Square {
- side: double
+ area(): double
}
enum Color <<palette>>
class Canvas

Circle --|> Shape
Square --|> Shape
Circle ..|> Drawable
Canvas o-- Shape : holds
Shape --> Color : fill
@end_uml
""").save("docs/hero")


def example_checkout():
    """Sequence diagram: actor, self message, alt block, note and divider."""
    create_diagram("""
@start_uml
actor Customer
participant Shop order 1
participant Payments order 2

Customer -> Shop: checkout()
Shop -> Shop: validate cart
note over Shop: stock reserved
Shop -> Payments: charge(total)
alt approved
Payments --> Shop: receipt
Shop -->> Customer: confirmation mail
else declined
Payments --> Shop: error
Shop --> Customer: retry page
end
... next day ...
Shop ->> Customer: shipping notice
@end_uml
""").save("docs/example_checkout")


def example_themed():
    """Same diagram rendered with an external theme file layered on top."""
    (
        create_diagram("""
@start_uml
participant Client
participant Server
Client -> Server: Request
Server --> Client: Response
@end_uml
""")
        .with_style_sheet(".participant { fill: #E8F0FF; --rx: 10; --ry: 10; }")
        .save("docs/example_themed")
    )


if __name__ == "__main__":
    import os

    logging.basicConfig(level=logging.INFO)
    os.makedirs("docs", exist_ok=True)

    print("Generating hero example...")
    hero_example()

    print("Generating checkout sequence...")
    example_checkout()

    print("Generating themed example...")
    example_themed()

    print("\nAll examples generated in docs/")
