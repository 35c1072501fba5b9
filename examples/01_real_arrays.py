import math

from ndfield import RealField, elementwise, nd_field

ctx = nd_field((2, 3), RealField())

grid = ctx.produce(lambda idx: idx[0] + idx[1])
shifted = grid + 10
scaled = (shifted - ctx.one) / 2
wave = elementwise(math.cos)(scaled * math.pi)

for index, value in wave.elements():
    print(index, round(value, 3))

print(scaled.to_numpy())
