# -*- coding: utf-8 -*-
"""
This software is part of mandelgrid.

This python module implements unit tests for the collectives that build the grid of workers.

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <http://www.gnu.org/licenses/>.
"""

import unittest
from unittest import mock

from mpi4py import MPI

from mandelgrid.utils.mpi import (CartesianLayout, GroupFormationError, LocalCollective, MPICollective)


class LocalCollectiveTest(unittest.TestCase):

    def setUp(self):
        self.group = LocalCollective()

    def test_near_square_shapes(self):
        self.assertEqual(self.group.choose_grid_shape(1), (1, 1))
        self.assertEqual(self.group.choose_grid_shape(4), (2, 2))
        self.assertEqual(self.group.choose_grid_shape(6), (3, 2))
        self.assertEqual(self.group.choose_grid_shape(8), (4, 2))
        self.assertEqual(self.group.choose_grid_shape(12), (4, 3))
        self.assertEqual(self.group.choose_grid_shape(7), (7, 1))

    def test_matches_mpi(self):
        for total_workers in [1, 2, 3, 4, 6, 8, 9, 12, 16]:
            self.assertEqual(self.group.choose_grid_shape(total_workers),
                             tuple(MPI.Compute_dims(total_workers, 2)))

    def test_row_major_coordinates(self):
        handle = self.group.build_cartesian_topology(3, 2)
        coordinates = [self.group.coordinates_of(handle, rank) for rank in range(6)]

        self.assertEqual(coordinates, [(0, 0), (0, 1), (1, 0), (1, 1), (2, 0), (2, 1)])

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            self.group.choose_grid_shape(0)
        with self.assertRaises(GroupFormationError):
            self.group.build_cartesian_topology(0, 3)
        with self.assertRaises(ValueError):
            self.group.coordinates_of(CartesianLayout(2, 2), 4)

    def test_abort(self):
        with self.assertRaises(SystemExit):
            self.group.abort()


class MPICollectiveTest(unittest.TestCase):

    def setUp(self):
        self.group = MPICollective(MPI.COMM_SELF)

    def test_rank_and_size(self):
        self.assertEqual(self.group.rank, 0)
        self.assertEqual(self.group.size, 1)

    def test_default_communicator(self):
        self.assertIs(MPICollective().comm, MPI.COMM_WORLD)

    def test_grid_shape(self):
        self.assertEqual(self.group.choose_grid_shape(1), (1, 1))
        self.assertEqual(self.group.choose_grid_shape(6), (3, 2))
        self.assertEqual(self.group.choose_grid_shape(13), (13, 1))

    def test_cartesian_topology(self):
        cart = self.group.build_cartesian_topology(1, 1)

        self.assertIsInstance(cart, MPI.Cartcomm)
        self.assertEqual(cart.Get_topo()[0], [1, 1])
        self.assertEqual(cart.Get_topo()[1], [False, False])
        self.assertEqual(self.group.coordinates_of(cart, 0), (0, 0))

    def test_grid_larger_than_communicator(self):
        with self.assertRaises(GroupFormationError):
            self.group.build_cartesian_topology(2, 2)

    def test_grid_smaller_than_communicator(self):
        world = MPICollective(MPI.COMM_WORLD)
        with self.assertRaises(GroupFormationError):
            world.build_cartesian_topology(world.size + 1, 1)

    def test_failed_grid_shape(self):
        with mock.patch.object(MPI, "Compute_dims", side_effect=MPI.Exception(MPI.ERR_DIMS)):
            with self.assertRaises(GroupFormationError):
                self.group.choose_grid_shape(4)

    def test_failed_coordinates(self):
        cart = mock.Mock(**{"Get_coords.side_effect": MPI.Exception(MPI.ERR_RANK)})
        with self.assertRaises(GroupFormationError):
            self.group.coordinates_of(cart, 3)
