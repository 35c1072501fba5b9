from ndfield import PrimeField, nd_field

GF7 = PrimeField(7)
ctx = nd_field((3, 3), GF7)

# Multiplication table of GF(7) restricted to 1..3
table = ctx.produce(lambda idx: GF7.multiply(idx[0] + 1, idx[1] + 1))
inverse = ctx.one / table
check = table * inverse

assert check.content_equals(ctx.one)
for index, value in inverse.elements():
    print(f"1 / {table.get(index)} = {value} (mod 7)")
