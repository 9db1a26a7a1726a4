# Checkout Engine
